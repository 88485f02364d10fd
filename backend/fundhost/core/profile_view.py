"""Profile View — pure view model of a user or organization profile page.

Invariants:
    - Pure function of its inputs (no IO, no database)
    - Memberships are grouped by lowercase role; roles without wording are skipped
    - The HOST role gets a menu anchor but no membership section: hosting has its own
    - Empty profile means missing image or missing long description

Design Decisions:
    - The service layer loads ProfileData; this module only decides what the page says,
      so every wording rule is testable without a database
"""

from dataclasses import dataclass, field
from datetime import datetime

from fundhost.core import profile_strings as strings
from fundhost.core.domain_types import CollectiveType

HOSTED_COLLECTIVES_LIMIT = 20
BACKER_CARD_THRESHOLD = 10


@dataclass
class MembershipCard:
    role: str
    collective_id: int
    slug: str
    name: str
    image: str | None = None
    description: str | None = None
    public_message: str | None = None
    since: datetime | None = None


@dataclass
class HostedCollective:
    slug: str
    name: str
    image: str | None
    balance: int
    currency: str


@dataclass
class TierCard:
    name: str
    description: str | None
    amount: int | None
    currency: str
    interval: str | None


@dataclass
class ProfileData:
    """Everything the page needs, loaded by the profile service."""
    slug: str
    name: str
    type: CollectiveType
    created_at: datetime
    description: str | None = None
    long_description: str | None = None
    long_description_html: str | None = None
    image: str | None = None
    twitter_handle: str | None = None
    can_apply: bool = False
    accepts_applications: bool = False
    parent_image: str | None = None
    parent_twitter_handle: str | None = None
    memberships: list[MembershipCard] = field(default_factory=list)
    tiers: list[TierCard] = field(default_factory=list)
    hosted_count: int = 0
    hosted: list[HostedCollective] = field(default_factory=list)


@dataclass
class MenuAction:
    label: str
    href: str
    css_class: str = "whiteblue"


@dataclass
class RoleSection:
    role: str
    title: str
    memberships: list[MembershipCard]


@dataclass
class HostingSection:
    title: str
    manage_expenses_href: str | None
    apply_href: str | None
    collectives: list[HostedCollective]


@dataclass
class OrderCreatedNotice:
    thank_you: str
    message: str
    collective_card: MembershipCard | None = None


@dataclass
class ProfileView:
    title: str
    description: str | None
    twitter_handle: str | None
    header_image: str | None
    href: str
    menu_info: str
    menu_actions: list[MenuAction]
    cta: MenuAction | None
    message: str | None
    order_created: OrderCreatedNotice | None
    empty_profile_hints: list[str]
    edit_button: MenuAction | None
    long_description_html: str | None
    tiers: list[TierCard]
    hosting: HostingSection | None
    sections: list[RoleSection]


def group_memberships(memberships: list[MembershipCard]) -> dict[str, list[MembershipCard]]:
    """Group by lowercase role in ROLE_ORDER, dropping roles the page has no wording for."""
    grouped: dict[str, list[MembershipCard]] = {}
    for role in strings.ROLE_ORDER:
        of_role = [m for m in memberships if m.role.lower() == role]
        if of_role:
            grouped[role] = of_role
    return grouped


def _order_created(
    data: ProfileData,
    grouped: dict[str, list[MembershipCard]],
    collective_id: int | None,
) -> OrderCreatedNotice:
    created = next(
        (m for m in data.memberships if m.collective_id == collective_id), None,
    )
    backing = len(grouped.get("backer", []))
    return OrderCreatedNotice(
        thank_you=strings.ORDER_THANK_YOU,
        message=strings.ORDER_ADDED.format(collective=created.name if created else ""),
        collective_card=created if backing > BACKER_CARD_THRESHOLD else None,
    )


def _parse_collective_id(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def build_profile_view(
    data: ProfileData,
    logged_in: bool,
    can_edit: bool,
    query: dict[str, str] | None = None,
) -> ProfileView:
    """Decide the content of the profile page for the given viewer and query string."""
    query = query or {}
    profile_type = CollectiveType(data.type)
    base = f"/{data.slug}"
    edit_label = strings.EDIT_LINK[profile_type]
    grouped = group_memberships(data.memberships)

    menu_actions = [
        MenuAction(
            label=strings.pluralize(strings.MENU_ROLE_ACTIONS[role], len(members)),
            href=f"#{role.upper()}",
        )
        for role, members in grouped.items()
    ]
    if can_edit:
        menu_actions.append(
            MenuAction(label=edit_label, href=f"{base}/edit", css_class="whiteblue small allcaps"),
        )

    is_empty = not data.image or not data.long_description
    order_created = None
    hints = []
    if query.get("status") == "orderCreated":
        order_created = _order_created(
            data, grouped, _parse_collective_id(query.get("CollectiveId")),
        )
        if is_empty:
            hints.append(strings.EMPTY_PROFILE)
    if is_empty and not logged_in:
        hints.append(strings.LOGIN_TO_EDIT)
    edit_button = MenuAction(label=edit_label, href=f"{base}/edit") if is_empty and logged_in else None

    hosting = None
    if data.hosted_count > 0:
        hosting = HostingSection(
            title=strings.pluralize(
                strings.ROLE_TITLES[profile_type]["host"], data.hosted_count,
            ),
            manage_expenses_href=f"{base}/collectives/expenses" if can_edit else None,
            apply_href=f"{base}/apply" if data.accepts_applications else None,
            collectives=data.hosted[:HOSTED_COLLECTIVES_LIMIT],
        )

    sections = [
        RoleSection(
            role=role.upper(),
            title=strings.pluralize(strings.ROLE_TITLES[profile_type][role], len(members)),
            memberships=members,
        )
        for role, members in grouped.items()
        if role != "host"
    ]

    return ProfileView(
        title=data.name,
        description=data.description or data.long_description,
        twitter_handle=data.twitter_handle or data.parent_twitter_handle,
        header_image=data.parent_image,
        href=base,
        menu_info=strings.SINCE[profile_type].format(year=data.created_at.year),
        menu_actions=menu_actions,
        cta=MenuAction(label=strings.APPLY_CTA, href=f"{base}/apply") if data.can_apply else None,
        message=query.get("message"),
        order_created=order_created,
        empty_profile_hints=hints,
        edit_button=edit_button,
        long_description_html=data.long_description_html,
        tiers=data.tiers,
        hosting=hosting,
        sections=sections,
    )
