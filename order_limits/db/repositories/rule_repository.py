"""
Rule Repository.

CRUD for merchant quantity rules.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from order_limits.db.models import Rule
from order_limits.db.repositories.base import BaseRepository, log_operation
from order_limits.utils.error_handler import NotFoundException, ValidationException

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("min_quantity", "max_quantity", "enabled", "message", "target_title")


def check_bounds(min_quantity: Optional[int], max_quantity: Optional[int]) -> None:
    """
    Reject a minimum greater than the maximum when both are set.

    Raises:
        ValidationException: If min_quantity > max_quantity
    """
    if min_quantity is not None and max_quantity is not None and min_quantity > max_quantity:
        raise ValidationException(
            message="Minimum quantity cannot be greater than maximum quantity",
            field="minQuantity",
            invalid_value=min_quantity,
            expected_format=f"<= {max_quantity}",
        )


class RuleRepository(BaseRepository):
    """Repository for the rules table."""

    @log_operation()
    async def list_for_shop(self, shop_id: str) -> List[Rule]:
        """All rules of a shop, newest first."""
        async with self.session() as session:
            result = await session.execute(
                select(Rule).where(Rule.shop_id == shop_id).order_by(Rule.created_at.desc())
            )
            return list(result.scalars().all())

    @log_operation()
    async def list_enabled(self, shop_id: str) -> List[Rule]:
        """Enabled rules of a shop in creation order."""
        async with self.session() as session:
            result = await session.execute(
                select(Rule)
                .where(Rule.shop_id == shop_id, Rule.enabled.is_(True))
                .order_by(Rule.created_at.asc())
            )
            return list(result.scalars().all())

    @log_operation()
    async def get(self, rule_id: str) -> Optional[Rule]:
        async with self.session() as session:
            return await session.get(Rule, rule_id)

    @log_operation()
    async def create(
        self,
        shop_id: str,
        rule_type: str,
        target_id: Optional[str] = None,
        target_title: Optional[str] = None,
        min_quantity: Optional[int] = None,
        max_quantity: Optional[int] = None,
        message: Optional[str] = None,
    ) -> Rule:
        """
        Create an enabled rule for a shop.

        The shop row must already exist.
        """
        check_bounds(min_quantity, max_quantity)

        async with self.session() as session:
            rule = Rule(
                shop_id=shop_id,
                rule_type=rule_type,
                target_id=target_id,
                target_title=target_title,
                min_quantity=min_quantity,
                max_quantity=max_quantity,
                message=message,
                enabled=True,
            )
            session.add(rule)
            await session.flush()
            await session.refresh(rule)

        logger.info(f"✅ Rule created: {rule.id} ({rule_type}) for {shop_id}")
        return rule

    @log_operation()
    async def update(self, rule_id: str, changes: Dict[str, Any]) -> Rule:
        """
        Apply a partial update. Keys outside UPDATABLE_FIELDS are ignored.

        Raises:
            NotFoundException: If the rule does not exist
            ValidationException: If the resulting bounds are inconsistent
        """
        async with self.session() as session:
            rule = await session.get(Rule, rule_id)
            if rule is None:
                raise NotFoundException(message="Rule not found", resource="rule", resource_id=rule_id)

            for key, value in changes.items():
                if key in UPDATABLE_FIELDS:
                    setattr(rule, key, value)

            check_bounds(rule.min_quantity, rule.max_quantity)

            await session.flush()
            await session.refresh(rule)

        logger.info(f"✏️ Rule updated: {rule_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return rule

    @log_operation()
    async def delete(self, rule_id: str) -> None:
        """
        Raises:
            NotFoundException: If the rule does not exist
        """
        async with self.session() as session:
            rule = await session.get(Rule, rule_id)
            if rule is None:
                raise NotFoundException(message="Rule not found", resource="rule", resource_id=rule_id)
            await session.delete(rule)

        logger.info(f"🗑️ Rule deleted: {rule_id}")
