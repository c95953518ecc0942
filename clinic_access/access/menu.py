"""
Navigation menu composition.

Menu items are grouped by the tier they actually require under the
current configuration, not by where they sit in the catalogue, so raising
a page's tier moves it into a higher group.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..notifications import describe_navigation_denied
from .controller import AccessController
from .types import AccessTier


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str


@dataclass(frozen=True)
class MenuGroup:
    """Reachable items that share a required tier."""

    tier: AccessTier
    title: str
    color: str
    items: list[MenuItem] = field(default_factory=list)
    active: bool = False  # styling only


DEFAULT_MENU: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard"),
    MenuItem("patients", "Patients"),
    MenuItem("forms", "Medical Forms"),
    MenuItem("treatments", "Treatments & Fees"),
    MenuItem("medical-record-summary", "Medical Record Summary"),
    MenuItem("products", "Products"),
    MenuItem("product-field-trip", "Field Trip Products"),
    MenuItem("field-trip-sales", "Field Trip Sales"),
    MenuItem("doctor-status", "Employees & Doctors"),
    MenuItem("attendance", "Attendance"),
    MenuItem("sitting-fees", "Sitting Fees"),
    MenuItem("sales", "Sales"),
    MenuItem("stock-opname", "Stock Taking"),
    MenuItem("promo", "Promotions"),
    MenuItem("expenses", "Expenses"),
    MenuItem("salaries", "Employee Salaries"),
    MenuItem("reports", "Reports"),
    MenuItem("security-settings", "Security Settings"),
)


class MenuComposer:
    """Builds the navigation menu from the controller's current state."""

    def __init__(self, controller: AccessController, items: Sequence[MenuItem] = DEFAULT_MENU):
        self.controller = controller
        self.items = tuple(items)

    def compose(self) -> list[MenuGroup]:
        """Group reachable items by required tier, in ascending tier order.

        Groups with nothing reachable are left out.
        """
        controller = self.controller
        by_tier: dict[AccessTier, list[MenuItem]] = {tier: [] for tier in AccessTier}
        for item in self.items:
            required = controller.resource_tier(item.id)
            if controller.has_access(required):
                by_tier[required].append(item)

        return [
            MenuGroup(
                tier=tier,
                title=tier.profile.section_title,
                color=controller.tier_color(tier),
                items=by_tier[tier],
                active=tier == controller.current_tier,
            )
            for tier in sorted(AccessTier)
            if by_tier[tier]
        ]

    def visible_items(self) -> list[MenuItem]:
        return [item for group in self.compose() for item in group.items]

    def navigate(self, resource_id: str) -> bool:
        """Check a navigation request, notifying the user when refused."""
        decision = self.controller.check_resource(resource_id)
        if not decision.allowed:
            self.controller.notifier.publish(describe_navigation_denied(decision.required))
        return decision.allowed

    def watch(self, callback: Callable[[list[MenuGroup]], None]) -> Callable[[], None]:
        """Deliver a freshly composed menu after every tier or config change.

        Returns:
            A function that stops the updates
        """
        return self.controller.subscribe(lambda _tier: callback(self.compose()))
