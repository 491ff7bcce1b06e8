from swapshop.services.match_service import propose_garment, update_status
from swapshop.services.superlike_service import get_remaining_today, send_super_like
from swapshop.services.swipe_service import swipe, undo_last_swipe

__all__ = ["swipe", "undo_last_swipe", "send_super_like", "get_remaining_today", "update_status", "propose_garment"]
