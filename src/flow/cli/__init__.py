from .cli_controller import CLIController

__all__ = ["CLIController"]
