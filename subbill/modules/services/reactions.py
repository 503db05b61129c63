"""Like/dislike/rating state for one user on one service.

Counters are applied locally after the matching rpc succeeds so the page and
API can answer without re-reading the service row.
"""
from pydantic import BaseModel
from typing import Optional
from subbill.modules.services.schemas import ServiceResponse, UserRating


class ReactionState(BaseModel):
    liked: bool = False
    disliked: bool = False
    likes: int = 0
    dislikes: int = 0
    rating: Optional[float] = None

    @classmethod
    def from_service(cls, service: ServiceResponse, user_rating: Optional[UserRating] = None) -> "ReactionState":
        user_rating = user_rating or UserRating()
        return cls(
            liked=bool(user_rating.liked),
            disliked=bool(user_rating.disliked),
            likes=service.likes or 0,
            dislikes=service.dislikes or 0,
            rating=user_rating.rating,
        )

    def toggle_like(self) -> "ReactionState":
        if self.liked:
            return self.model_copy(update={"liked": False, "likes": max(self.likes - 1, 0)})
        update = {"liked": True, "likes": self.likes + 1}
        if self.disliked:
            update.update(disliked=False, dislikes=max(self.dislikes - 1, 0))
        return self.model_copy(update=update)

    def toggle_dislike(self) -> "ReactionState":
        if self.disliked:
            return self.model_copy(update={"disliked": False, "dislikes": max(self.dislikes - 1, 0)})
        update = {"disliked": True, "dislikes": self.dislikes + 1}
        if self.liked:
            update.update(liked=False, likes=max(self.likes - 1, 0))
        return self.model_copy(update=update)

    def with_rating(self, rating: float) -> "ReactionState":
        return self.model_copy(update={"rating": rating})
