from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    INFLUENCER = "INFLUENCER"
    OWNER = "OWNER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


# Roles a visitor may pick at sign-up; MODERATOR and ADMIN are granted, never chosen
SELF_ASSIGNABLE_ROLES = (UserRole.USER, UserRole.INFLUENCER, UserRole.OWNER)

STAFF_ROLES = (UserRole.ADMIN, UserRole.MODERATOR)

# Authors shown under the "verified" timeline filter
VERIFIED_AUTHOR_ROLES = (UserRole.INFLUENCER, UserRole.OWNER, UserRole.ADMIN, UserRole.MODERATOR)
