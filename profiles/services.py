"""
Profile resolution: display names for user ids and lazy profile creation.
"""

import logging
from typing import Dict, Iterable, Optional

from django.db import DatabaseError, IntegrityError, transaction

from .models import Profile

logger = logging.getLogger(__name__)


def default_display_name(user_id: str, email: Optional[str] = None) -> str:
    """Email local part when an email is known, otherwise a truncated-id placeholder."""
    if email and '@' in email:
        local_part = email.split('@')[0]
        if local_part:
            return local_part
    return f"User {str(user_id)[:8]}"


def ensure_profile(user_id: str, email: Optional[str] = None) -> Profile:
    """
    Return the profile for ``user_id``, creating it on first access.

    Concurrent first accesses race on the unique ``user_id`` constraint; the
    loser reads back the row the winner inserted.
    """
    profile = Profile.objects.filter(user_id=user_id).first()
    if profile:
        return profile

    try:
        with transaction.atomic():
            profile = Profile.objects.create(
                user_id=user_id,
                email=email,
                full_name=default_display_name(user_id, email),
            )
    except IntegrityError:
        logger.debug("Profile for %s created concurrently, reusing it", user_id)
        return Profile.objects.get(user_id=user_id)

    logger.info("Created profile for user %s", user_id)
    return profile


def _display_name_for(user_id: str, profile: Optional[Profile]) -> str:
    if profile is not None:
        if profile.full_name:
            return profile.full_name
        if profile.email:
            return default_display_name(user_id, profile.email)
    return default_display_name(user_id)


def resolve_display_name(user_id: str) -> str:
    """Display name for ``user_id``. Never raises."""
    try:
        profile = Profile.objects.filter(user_id=user_id).only('full_name', 'email').first()
    except DatabaseError:
        logger.exception("Failed to load profile for %s", user_id)
        profile = None
    return _display_name_for(user_id, profile)


def resolve_display_names(user_ids: Iterable[str]) -> Dict[str, str]:
    """Batch variant of :func:`resolve_display_name` (one query)."""
    ids = {str(uid) for uid in user_ids if uid}
    if not ids:
        return {}
    try:
        profiles = {
            p.user_id: p for p in Profile.objects.filter(user_id__in=ids).only('user_id', 'full_name', 'email')
        }
    except DatabaseError:
        logger.exception("Failed to load profiles")
        profiles = {}
    return {uid: _display_name_for(uid, profiles.get(uid)) for uid in ids}
