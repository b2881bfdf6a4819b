"""Abstract base class for short link record stores."""

from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import datetime

from .models import ShortLink


class ShortLinkStoreBase(ABC):
    """Abstract base class for short link record store operations.
    
    Implementations must enforce uniqueness of ``short_code`` at write time
    and apply click increments atomically; callers hold no locks.
    """
    
    def __init__(self, db_config: str):
        """Initialize store.
        
        Args:
            db_config: Store connection string
        """
        self.db_config = db_config
    
    @abstractmethod
    async def find_by_code(self, short_code: str) -> Optional[ShortLink]:
        """Find a short link by exact code.
        
        Args:
            short_code: The short code to lookup
            
        Returns:
            The record if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def short_code_exists(self, short_code: str) -> bool:
        """Check if a short code has ever been issued.
        
        Expired records still count; codes are never reused.
        
        Args:
            short_code: The short code to check
            
        Returns:
            True if exists, False otherwise
        """
        pass
    
    @abstractmethod
    async def create_unique(
        self,
        short_code: str,
        original_url: str,
        expires_at: Optional[datetime] = None,
        owner_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        """Insert a new short link if the code is free.
        
        Args:
            short_code: The short code to use
            original_url: The original long URL
            expires_at: Optional absolute expiry time
            owner_id: Optional identity owning the record
            created_at: Optional creation timestamp (defaults to now)
            
        Returns:
            The created record
            
        Raises:
            CodeConflictError: If short_code already exists
        """
        pass
    
    @abstractmethod
    async def increment_clicks(self, short_code: str, by: int = 1) -> Optional[ShortLink]:
        """Atomically add ``by`` to the click counter.
        
        Args:
            short_code: The short code to update
            by: Amount to add (must be positive)
            
        Returns:
            The updated record, or None if the code does not exist
        """
        pass
    
    @abstractmethod
    async def delete_by_code(self, short_code: str) -> bool:
        """Delete a short link.
        
        Args:
            short_code: The short code to delete
            
        Returns:
            True if deleted, False if not found
        """
        pass
    
    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[ShortLink]:
        """List the records owned by an identity, newest first.
        
        Args:
            owner_id: Owning identity
            
        Returns:
            List of records ordered by created_at descending
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close store connections."""
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy.
        
        Returns:
            True if healthy, False otherwise
        """
        pass
