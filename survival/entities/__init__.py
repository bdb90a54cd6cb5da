from .merchant import Merchant, TradeOffer
from .player import Player

__all__ = ["Merchant", "Player", "TradeOffer"]
