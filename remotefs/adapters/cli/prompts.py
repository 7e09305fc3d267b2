"""
Rich-based user prompts and error reporting
"""
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt, Confirm

from ...core.interfaces import ErrorReporter, PromptProvider
from ...core.logging import get_logger, get_stdout_console, get_stderr_console

logger = get_logger(__name__)

class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""
    
    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stdout_console()
    
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        if password:
            return Prompt.ask(message, password=True, default=default, console=self.console)
        return Prompt.ask(message, default=default, console=self.console)
    
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        return Confirm.ask(message, default=default, console=self.console)


class ConsoleReporter(ErrorReporter):
    """Prints reported errors to stderr and logs them at debug level"""
    
    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stderr_console()
    
    def report(self, operation: str, error: BaseException) -> None:
        logger.debug("%s failed", operation, exc_info=error)
        self.console.print(f"[red]✗[/red] {escape(operation)}: {escape(str(error))}", highlight=False)
