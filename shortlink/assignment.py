"""Short code assignment with collision avoidance."""

import logging
from typing import Optional
from datetime import datetime

from .shortcode import ShortCodeGenerator
from .database.base import ShortLinkStoreBase
from .database.models import ShortLink
from .common.validators import is_valid_custom_code
from .errors import CodeConflictError, CodeTaken, InvalidCode, SpaceExhausted


class CodeAssigner:
    """Assign never-before-issued short codes and create records with them.

    The existence check before insert is only an optimisation: two
    concurrent requests can pick the same code between check and write.
    The store's conditional insert is the real guard, and a conflict on a
    generated code just means "pick another one".
    """

    def __init__(
        self,
        store: ShortLinkStoreBase,
        generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        fallback_code_length: int = 8,
        max_insert_attempts: int = 3,
    ):
        """Initialize code assigner.

        Args:
            store: Record store used for existence checks and inserts
            generator: Optional short code generator
            logger: Optional logger
            max_collision_retries: Random attempts per code length
            fallback_code_length: Longer length tried once the default keeps colliding
            max_insert_attempts: Inserts to try when the store reports a conflict
        """
        self.store = store
        self.generator = generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.fallback_code_length = max(fallback_code_length, self.generator.default_length)
        self.max_insert_attempts = max_insert_attempts

    async def assign(self, custom_code: Optional[str] = None) -> str:
        """Pick a short code that is not present in the store.

        Args:
            custom_code: Optional user-supplied code

        Returns:
            The short code to insert

        Raises:
            InvalidCode: custom code does not match ``[A-Za-z0-9]{3,20}``
            CodeTaken: custom code already exists
            SpaceExhausted: no free random code within the retry budget
        """
        # An empty custom code means none was requested
        if custom_code:
            valid, error = is_valid_custom_code(custom_code)
            if not valid:
                raise InvalidCode(error)

            if await self.store.short_code_exists(custom_code):
                raise CodeTaken()
            return custom_code

        return await self._generate_unique_code()

    async def create(
        self,
        original_url: str,
        expires_at: Optional[datetime] = None,
        owner_id: Optional[str] = None,
        custom_code: Optional[str] = None,
    ) -> ShortLink:
        """Assign a code and insert the record, retrying lost insert races.

        Raises:
            InvalidCode, CodeTaken, SpaceExhausted: see ``assign``
        """
        for attempt in range(1, self.max_insert_attempts + 1):
            short_code = await self.assign(custom_code)
            try:
                return await self.store.create_unique(
                    short_code,
                    original_url,
                    expires_at=expires_at,
                    owner_id=owner_id,
                )
            except CodeConflictError:
                if custom_code:
                    raise CodeTaken() from None
                self.logger.warning(
                    f"Insert conflict on generated code {short_code} "
                    f"(attempt {attempt}/{self.max_insert_attempts})"
                )

        raise SpaceExhausted()

    async def _generate_unique_code(self) -> str:
        """Generate a code not yet in the store, falling back to a longer length."""
        lengths = [self.generator.default_length]
        if self.fallback_code_length > self.generator.default_length:
            lengths.append(self.fallback_code_length)

        for length in lengths:
            for attempt in range(self.max_collision_retries):
                code = self.generator.generate_random(length)
                if not await self.store.short_code_exists(code):
                    if attempt:
                        self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                    return code
            self.logger.warning(
                f"{self.max_collision_retries} collisions at length {length}"
            )

        raise SpaceExhausted()
