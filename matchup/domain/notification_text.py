# matchup/domain/notification_text.py
"""
Text for the pair-up notification each group member receives.

Output is Telegram HTML; every user-provided value is escaped.
"""
from html import escape
from typing import List

from matchup.domain.models import Member


class MatchingActions:
    """Callback data for the buttons on a pair-up message."""

    OPT_IN = "optin"
    OPT_OUT = "optout"


def contact_link(member: Member) -> str:
    """Link that opens a chat with the member."""
    if member.username:
        return f"https://t.me/{member.username}"
    return f"tg://user?id={member.address}"


def _label(member: Member, use_full_name: bool = False) -> str:
    name = member.name if use_full_name else member.display_name
    label = escape(name)
    if member.is_guest:
        label += " (guest)"
    return label


def meetup_title(recipient: Member, rest_of_group: List[Member]) -> str:
    names = [recipient.display_name] + [m.display_name for m in rest_of_group]
    return "Meetup: " + " / ".join(names)


def build_pair_up_text(
    team_name: str,
    recipient: Member,
    rest_of_group: List[Member],
    bot_display_name: str,
) -> str:
    """
    Build the message telling recipient who they have been matched with.

    Example:
    >>> alice = Member(id="1", name="Alice Doe", given_name="Alice", address="11")
    >>> bob = Member(id="2", name="Bob Roe", given_name="Bob", address="22")
    >>> build_pair_up_text("Platform", alice, [bob], "Matchup").splitlines()[0]
    "🎉 Hi Alice! You've been matched with <b>Bob</b>."
    """
    others = [m for m in rest_of_group if m.id != recipient.id]
    if not others:
        raise ValueError("A pair-up message needs at least one other group member")

    greeting = f"🎉 Hi {escape(recipient.display_name)}!"
    if len(others) == 1:
        matched = f"{greeting} You've been matched with <b>{_label(others[0])}</b>."
    else:
        bullets = "\n".join(
            f"• <a href=\"{escape(contact_link(m))}\">{_label(m, use_full_name=True)}</a>"
            for m in others
        )
        matched = f"{greeting} You've been matched with a group:\n{bullets}"

    intro = (
        f"I'm {escape(bot_display_name)} in <b>{escape(team_name)}</b>. "
        "Every round I pair you with coworkers you may not have met yet."
    )
    call_to_action = (
        "Reach out and find a time to meet. "
        f"Suggested title: <i>{escape(meetup_title(recipient, others))}</i>"
    )
    return f"{matched}\n\n{intro}\n\n{call_to_action}"
