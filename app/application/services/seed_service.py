"""Seed service — the fixed set of demo users."""

from typing import List

import structlog

from app.application.services.user_service import create_user
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserCreate, UserRead

logger = structlog.get_logger(__name__)

SEED_USERS: List[UserCreate] = [
    UserCreate(name="Alice", email="alice@prisma.io", id_card_no="10000-10000-001"),
    UserCreate(name="Bob", email="bob@prisma.io", id_card_no="10000-10000-002"),
    UserCreate(name="Charlie", email="charlie@prisma.io", id_card_no="10000-10000-003"),
    UserCreate(name="Diana", email="diana@prisma.io", id_card_no="10000-10000-004"),
    UserCreate(name="Edward", email="edward@prisma.io", id_card_no="10000-10000-005"),
    UserCreate(name="Fiona", email="fiona@prisma.io", id_card_no="10000-10000-006"),
    UserCreate(name="George", email="george@prisma.io", id_card_no="10000-10000-007"),
    UserCreate(name="Hannah", email="hannah@prisma.io", id_card_no="10000-10000-008"),
    UserCreate(name="Isaac", email="isaac@prisma.io", id_card_no="10000-10000-009"),
    UserCreate(name="Julia", email="julia@prisma.io", id_card_no="10000-10000-010"),
    UserCreate(name="Kevin", email="kevin@prisma.io", id_card_no="10000-10000-011"),
    UserCreate(name="Luna", email="luna@prisma.io", id_card_no="10000-10000-012"),
]


def seed_users(repo: UserRepository, users: List[UserCreate] = SEED_USERS) -> List[UserRead]:
    """Create *users* one at a time, in order.

    Not wrapped in a transaction: rows created before a failure stay.
    """
    created = [create_user(repo, user_in) for user_in in users]
    logger.info("Users seeded", count=len(created))
    return created
