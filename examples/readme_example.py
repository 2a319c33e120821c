import bciremote
import bciremote.util
from bciremote import BCI2000Remote

bciremote.util.start_client_log(log_to_stdout=True)  # also logs to ~/.bciremote/client.log

cfg = bciremote.load_remote_config("local")  # ~/.bciremote/remotes.ini or package default

with BCI2000Remote.from_config(cfg) as remote:
    remote.subject_id = "S01"
    remote.session_id = "001"
    if not remote.connect(cfg.init_commands):
        raise SystemExit(remote.result)

    if not remote.startup_modules(cfg.modules):
        raise SystemExit(remote.result)

    remote.add_state_variable("Marker", 8, 0)
    if not remote.start():
        print("Start failed:", remote.result, remote.response)

    for marker in (1, 2, 3):
        remote.set_state_variable("Marker", marker)
        ok, value = remote.get_state_variable("Marker")
        print("Marker =", value if ok else remote.result)

# leaving the block stops the system and disconnects
