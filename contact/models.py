"""
contact/models.py -- Domain dataclass for contact-form submissions.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ContactMessage:
    """A message left through the public contact form.

    Write-once: there is no update or delete path. email is stored normalized.
    """

    name: str
    email: str
    message: str
    id: Optional[str] = None
    created_at: str = ""
