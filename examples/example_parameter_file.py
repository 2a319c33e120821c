# Push a local parameter file line by line, then check one of its values.
import sys

import bciremote.util
from bciremote import BCI2000Remote, TcpConnection

PRM_FILE = sys.argv[1] if len(sys.argv) > 1 else "example.prm"

bciremote.util.start_client_log(log_to_stdout=True)

with BCI2000Remote(TcpConnection("127.0.0.1", 3999)) as remote:
    if not remote.connect():
        raise SystemExit(remote.result)

    # reread: also send the "set parameter" pass, not only "add parameter"
    remote.load_parameters_local(PRM_FILE, reread=True)
    if remote.result:
        print(remote.result)

    ok, value = remote.get_parameter("SampleBlockSize")
    print("SampleBlockSize:", value.strip("\r\n>") if ok else remote.result)
