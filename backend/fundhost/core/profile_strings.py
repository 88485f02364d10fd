"""Profile Strings — wording of the user and organization profile page.

Invariants:
    - All strings are pure data (no IO, no computation beyond formatting)
    - Every pluralized message has "one" and "other" forms, selected by n == 1
    - Role keys are lowercase member roles; roles without wording are absent

Design Decisions:
    - Users speak in the first person singular, organizations in the plural
      ("I'm backing" vs "We are backing")
"""

from fundhost.core.domain_types import CollectiveType

PROFILE_TYPES = frozenset({CollectiveType.USER, CollectiveType.ORGANIZATION})

# Order of the menu anchors and role sections on the page
ROLE_ORDER = ("host", "admin", "member", "backer", "follower")

MENU_ROLE_ACTIONS: dict[str, dict[str, str]] = {
    "host": {"one": "hosting {n} collective", "other": "hosting {n} collectives"},
    "admin": {"one": "contributing to {n} collective", "other": "contributing to {n} collectives"},
    "member": {"one": "member of {n} collective", "other": "member of {n} collectives"},
    "backer": {"one": "backing {n} collective", "other": "backing {n} collectives"},
    "follower": {"one": "following {n} collective", "other": "following {n} collectives"},
}

_USER_ROLE_TITLES: dict[str, dict[str, str]] = {
    "host": {"one": "I'm hosting this collective", "other": "I'm hosting these collectives"},
    "admin": {
        "one": "I'm a core contributor of this collective",
        "other": "I'm a core contributor of these collectives",
    },
    "member": {"one": "I'm a member of this collective", "other": "I'm a member of these collectives"},
    "backer": {"one": "I'm backing this collective", "other": "I'm backing these collectives"},
    "follower": {"one": "I'm following this collective", "other": "I'm following these collectives"},
}

_ORGANIZATION_ROLE_TITLES: dict[str, dict[str, str]] = {
    "host": {"one": "We are hosting this collective", "other": "We are hosting {n} collectives"},
    "admin": {
        "one": "We are a core contributor of this collective",
        "other": "We are a core contributor of these collectives",
    },
    "member": {"one": "We are a member of this collective", "other": "We are a member of these collectives"},
    "backer": {"one": "We are backing this collective", "other": "We are backing these collectives"},
    "follower": {"one": "We are following this collective", "other": "We are following these collectives"},
}

ROLE_TITLES: dict[CollectiveType, dict[str, dict[str, str]]] = {
    CollectiveType.USER: _USER_ROLE_TITLES,
    CollectiveType.ORGANIZATION: _ORGANIZATION_ROLE_TITLES,
}

SINCE: dict[CollectiveType, str] = {
    CollectiveType.USER: "Contributing Since {year}",
    CollectiveType.ORGANIZATION: "Contributing Since {year}",
}

EDIT_LINK: dict[CollectiveType, str] = {
    CollectiveType.USER: "edit profile",
    CollectiveType.ORGANIZATION: "edit organization",
}

APPLY_CTA = "Apply to create a collective"
MANAGE_EXPENSES = "Manage expenses"
ORDER_THANK_YOU = "Thank you for your donation! 🙏"
ORDER_ADDED = "We have added {collective} to your profile"
EMPTY_PROFILE = "Your profile looks a bit empty ¯\\_(ツ)_/¯"
LOGIN_TO_EDIT = "Please login to edit your profile"


def pluralize(forms: dict[str, str], n: int) -> str:
    """Pick the one/other form for n and fill in {n}."""
    return forms["one" if n == 1 else "other"].format(n=n)
