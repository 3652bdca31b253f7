"""Double-entry personal finance ledger."""

__version__ = "0.1.0"


def __getattr__(name):
    # The CLI pulls in every command module, so load it only on request
    if name == "main":
        from ledgerbook.cli.main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
