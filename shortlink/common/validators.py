"""Validation utilities for short link requests."""

import re
from urllib.parse import urlparse
from typing import Tuple

MAX_URL_LENGTH = 2048

CUSTOM_CODE_PATTERN = re.compile(r'[A-Za-z0-9]{3,20}')


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required."
    
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)."
    
    if any(c.isspace() for c in url):
        return False, "Invalid URL format. Must be http or https URL."
    
    try:
        result = urlparse(url)
        # Accessing port validates it is numeric and in range
        result.port
    except ValueError:
        return False, "Invalid URL format. Must be http or https URL."
    
    if result.scheme not in ("http", "https"):
        return False, "Invalid URL format. Must be http or https URL."
    
    if not result.hostname:
        return False, "Invalid URL format. URL must have a valid host."
    
    return True, ""


def is_valid_custom_code(short_code: str) -> Tuple[bool, str]:
    """Validate a user-supplied short code.
    
    Custom codes share the namespace of generated codes, so they are
    restricted to the same alphabet: 3 to 20 letters or digits.
    
    Args:
        short_code: The short code to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(short_code, str) or not CUSTOM_CODE_PATTERN.fullmatch(short_code):
        return False, "Custom code must be 3-20 alphanumeric characters."
    
    return True, ""
