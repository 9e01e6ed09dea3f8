"""Keyboard builder for the destination menu.

One row per category (callback `dl:<key>`) followed by one row of disk
buttons (callback `set_disk:<index>`), the selected disk marked.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from torrent_bridge.lib.messages import DISK_CURRENT_LABEL, DISK_OTHER_LABEL

CALLBACK_DOWNLOAD = "dl"
CALLBACK_SET_DISK = "set_disk"


def download_callback(category: str) -> str:
    return f"{CALLBACK_DOWNLOAD}:{category}"


def set_disk_callback(disk_index: int) -> str:
    return f"{CALLBACK_SET_DISK}:{disk_index}"


def build_destination_keyboard(
    categories: dict[str, str],
    disks: list[str],
    current_disk: int,
) -> InlineKeyboardMarkup:
    """Build the category + disk selection keyboard.

    Args:
        categories: Category folder name to button label, in display order
        disks: Configured disk root directories
        current_disk: Index of the disk to mark as selected

    Returns:
        InlineKeyboardMarkup for use with Telegram API
    """
    rows = [
        [InlineKeyboardButton(label, callback_data=download_callback(key))]
        for key, label in categories.items()
    ]

    disk_row = []
    for index, _path in enumerate(disks):
        template = DISK_CURRENT_LABEL if index == current_disk else DISK_OTHER_LABEL
        disk_row.append(
            InlineKeyboardButton(
                template.format(number=index + 1),
                callback_data=set_disk_callback(index),
            )
        )
    rows.append(disk_row)

    return InlineKeyboardMarkup(rows)
