# matchup/telegram/keyboards.py
from typing import List

from aiogram.utils.keyboard import InlineKeyboardBuilder

from matchup.domain.models import Member
from matchup.domain.notification_text import MatchingActions, contact_link


def pair_up_keyboard(rest_of_group: List[Member]):
    builder = InlineKeyboardBuilder()

    # Only members with a public username get a direct chat button
    for member in rest_of_group:
        if member.username:
            builder.button(text=f"💬 Chat with {member.display_name}", url=contact_link(member))

    builder.button(text="⏸ Pause matches", callback_data=MatchingActions.OPT_OUT)

    builder.adjust(1)  # one button per row
    return builder.as_markup()


def resume_keyboard():
    builder = InlineKeyboardBuilder()
    builder.button(text="▶️ Resume matches", callback_data=MatchingActions.OPT_IN)
    return builder.as_markup()


def pause_keyboard():
    builder = InlineKeyboardBuilder()
    builder.button(text="⏸ Pause matches", callback_data=MatchingActions.OPT_OUT)
    return builder.as_markup()
