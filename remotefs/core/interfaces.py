"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List, Optional, TYPE_CHECKING

from .logging import get_logger

if TYPE_CHECKING:
    from ..domain.files.models import FileInfo

logger = get_logger(__name__)


class FileTransferClient(ABC):
    """
    Protocol client primitives the file session is built on.
    
    Implementations raise builtin OSError subclasses; a missing path is
    always reported as FileNotFoundError.
    """
    
    @abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        """Open an existing file for reading"""
        pass
    
    @abstractmethod
    def create(self, path: str) -> BinaryIO:
        """Create or truncate a file and open it for writing"""
        pass
    
    @abstractmethod
    def open_append(self, path: str) -> BinaryIO:
        """Open an existing file for writing at its end, without creating it"""
        pass
    
    @abstractmethod
    def stat(self, path: str) -> "FileInfo":
        """Stat a single path"""
        pass
    
    @abstractmethod
    def listdir(self, path: str) -> List["FileInfo"]:
        """List the immediate children of a directory"""
        pass
    
    @abstractmethod
    def mkdir_all(self, path: str) -> None:
        """Create a directory and any missing parents"""
        pass
    
    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a single file"""
        pass
    
    @abstractmethod
    def rmdir(self, path: str) -> None:
        """Remove an empty directory"""
        pass
    
    @abstractmethod
    def remove_all(self, path: str) -> None:
        """Remove a path and everything below it"""
        pass
    
    @abstractmethod
    def rename(self, old_path: str, new_path: str, overwrite: bool = False) -> None:
        """Rename a path"""
        pass
    
    @abstractmethod
    def close(self) -> None:
        """Release the protocol client"""
        pass


class ConnectionFactory(ABC):
    """Session factory interface"""

    @abstractmethod
    def create(self, params: Dict[str, Any]) -> Any:
        """Create a connected session from configuration parameters"""
        pass


class ErrorReporter(ABC):
    """Sink for errors that are not raised to the caller"""
    
    @abstractmethod
    def report(self, operation: str, error: BaseException) -> None:
        """Report an error that occurred during an operation"""
        pass


class LoggingReporter(ErrorReporter):
    """Reports errors through the standard logger"""
    
    def report(self, operation: str, error: BaseException) -> None:
        logger.warning("%s failed: %s", operation, error)


class PromptProvider(ABC):
    """User prompt interface"""
    
    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass
    
    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        pass
