# Dry run of a full session against the in-memory operator, no BCI2000 needed.
import bciremote.util
from bciremote import BCI2000Remote, MockOperator

bciremote.util.start_client_log(log_to_file=False, log_to_stdout=True, log_level="DEBUG")

operator = MockOperator(failing_modules={"BrokenApplication": 0})

with BCI2000Remote(operator) as remote:
    remote.subject_id = "MOCK"
    remote.connect()

    # one module refuses to start: reported, nothing waits
    if not remote.startup_modules({"SignalGenerator": None, "BrokenApplication": None}):
        print(remote.result)

    remote.startup_modules(
        {
            "SignalGenerator": ["LogKeyboard=1"],
            "DummySignalProcessing": None,
            "DummyApplication": None,
        }
    )
    remote.start()
    print("State:", remote.get_system_state()[1].strip("\r\n>"))
    print("Already running?", remote.start(), remote.result)

print("Commands sent:")
for command in operator.commands:
    print("  ", command)
