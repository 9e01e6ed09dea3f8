"""User-facing message templates.

All chat texts live here so handlers only deal with placeholders.
Texts use legacy Telegram Markdown.
"""

# =============================================================================
# Intake
# =============================================================================

MAGNET_DETECTED = "🔗 Magnet detected. Choose destination:"

MEDIA_RECEIVED = "📥 Received: `{name}`\nChoose destination:"

MEDIA_TOO_LARGE = "⚠️ *File too large* ({size_mb}MB).\nBot API limit is *{limit_mb}MB*."

DISK_SELECTED = "💿 Disk: {path}\nChoose category:"

# =============================================================================
# Finalization
# =============================================================================

MAGNET_ADDED = "✅ Magnet added to qBit.\nDir: `{directory}`"

TORRENT_ADDED = "✅ Torrent added.\nDir: `{directory}`"

MEDIA_SAVED = "✅ Media saved to `{directory}`"

FETCH_FAILED = "❌ Could not get file from Telegram (Check 20MB limit)."

SUBMIT_FAILED = "❌ qBittorrent did not accept the download.\nDir: `{directory}`"

MEDIA_SAVE_FAILED = "❌ Could not save media to `{directory}`"

# =============================================================================
# Status and completion
# =============================================================================

STATUS_HEADER = "📊 *qBit Status*\n\n"

STATUS_LINE = "• `{name}`\n  {progress}% | {state}"

STATUS_EMPTY = "📭 No active torrents."

TORRENT_FINISHED = "✅ *Finished:* `{name}`"

# =============================================================================
# Keyboard labels
# =============================================================================

DISK_CURRENT_LABEL = "✅ Disk {number}"

DISK_OTHER_LABEL = "💾 D{number}"
