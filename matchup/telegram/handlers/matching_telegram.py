# matchup/telegram/handlers/matching_telegram.py
import logging
from html import escape

from aiogram import F, Router, types
from aiogram.enums import ChatMemberStatus, ChatType
from aiogram.filters import Command, CommandStart

from matchup.config.settings import settings
from matchup.domain.models import Member
from matchup.domain.notification_text import MatchingActions
from matchup.infrastructure.db.session import get_async_session
from matchup.services.membership_service import (
    join_team,
    leave_team,
    opt_in,
    opt_out,
    register_team,
    unregister_team,
)
from matchup.telegram.keyboards import pause_keyboard, resume_keyboard

logger = logging.getLogger(__name__)
router = Router()

GROUP_CHATS = {ChatType.GROUP, ChatType.SUPERGROUP}

# Central command list (help)
COMMANDS = [
    ("start", "Check if bot is alive"),
    ("help", "Show available commands"),
    ("join", "Join matches in this group (group chats)"),
    ("leave", "Stop being matched in this group (group chats)"),
    ("optout", "Pause all matches"),
    ("optin", "Resume matches"),
]


def member_from_user(user: types.User, is_guest: bool = False) -> Member:
    return Member(
        id=str(user.id),
        name=user.full_name,
        given_name=user.first_name or None,
        address=str(user.id),  # private chat id equals the user id
        username=user.username,
        is_guest=is_guest,
    )

# -----------------------
# Installs
# -----------------------

@router.my_chat_member(F.chat.type.in_(GROUP_CHATS))
async def on_bot_membership_changed(event: types.ChatMemberUpdated):
    team_id = str(event.chat.id)
    status = event.new_chat_member.status

    async for db in get_async_session():
        if status in (ChatMemberStatus.MEMBER, ChatMemberStatus.ADMINISTRATOR):
            await register_team(db, team_id, event.chat.title or "")
        elif status in (ChatMemberStatus.LEFT, ChatMemberStatus.KICKED):
            await unregister_team(db, team_id)

# -----------------------
# Group commands
# -----------------------

@router.message(Command("join"), F.chat.type.in_(GROUP_CHATS))
async def cmd_join(message: types.Message):
    user = message.from_user
    chat_member = await message.bot.get_chat_member(message.chat.id, user.id)
    member = member_from_user(user, is_guest=chat_member.status == ChatMemberStatus.RESTRICTED)

    async for db in get_async_session():
        try:
            await join_team(db, str(message.chat.id), member)
        except ValueError as e:
            await message.reply(str(e))
            return

    await message.reply(
        f"✅ {escape(member.display_name)}, you're in! "
        f"Send me /start in a private chat so I can message you your matches."
    )


@router.message(Command("leave"), F.chat.type.in_(GROUP_CHATS))
async def cmd_leave(message: types.Message):
    async for db in get_async_session():
        removed = await leave_team(db, str(message.chat.id), str(message.from_user.id))

    if removed:
        await message.reply("👋 You won't be matched in this group anymore.")
    else:
        await message.reply("You weren't signed up in this group.")


@router.message(Command("join", "leave"))
async def cmd_join_private(message: types.Message):
    await message.answer("Use this command inside the group you want to be matched in.")

# -----------------------
# Private commands
# -----------------------

@router.message(CommandStart())
async def cmd_start(message: types.Message):
    await message.answer(
        f"👋 Hi! I'm {escape(settings.BOT_DISPLAY_NAME)}. "
        "Add me to a group and send /join there, and I'll pair you up with "
        "teammates to meet every round.",
        reply_markup=pause_keyboard(),
    )


@router.message(Command("help"))
async def cmd_help(message: types.Message):
    lines = [f"/{name} - {description}" for name, description in COMMANDS]
    await message.answer("\n".join(lines))


@router.message(Command("optout"))
async def cmd_optout(message: types.Message):
    async for db in get_async_session():
        await opt_out(db, str(message.from_user.id))
    await message.answer("⏸ Matches paused. You can resume any time.", reply_markup=resume_keyboard())


@router.message(Command("optin"))
async def cmd_optin(message: types.Message):
    async for db in get_async_session():
        await opt_in(db, str(message.from_user.id))
    await message.answer("▶️ Matches resumed. See you next round!", reply_markup=pause_keyboard())

# -----------------------
# Buttons
# -----------------------

@router.callback_query(F.data == MatchingActions.OPT_OUT)
async def cb_optout(call: types.CallbackQuery):
    async for db in get_async_session():
        await opt_out(db, str(call.from_user.id))
    await call.answer("Matches paused")
    await call.message.answer("⏸ Matches paused. You can resume any time.", reply_markup=resume_keyboard())


@router.callback_query(F.data == MatchingActions.OPT_IN)
async def cb_optin(call: types.CallbackQuery):
    async for db in get_async_session():
        await opt_in(db, str(call.from_user.id))
    await call.answer("Matches resumed")
    await call.message.answer("▶️ Matches resumed. See you next round!", reply_markup=pause_keyboard())
