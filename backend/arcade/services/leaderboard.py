from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from arcade.models import Score, User

# Leaderboard pages never exceed this many rows
DEFAULT_LIMIT = 20


class LeaderboardQuery:
    def __init__(self, session):
        self.session = session

    def top_scores(self, game: Optional[str] = None, limit: int = DEFAULT_LIMIT) -> list:
        """Highest positive scores, best first, for one game or across all of them."""
        limit = min(limit, DEFAULT_LIMIT)
        stmt = (
            select(Score)
            .join(Score.user)
            .options(contains_eager(Score.user))
            .where(Score.score > 0)
        )
        if game:
            stmt = stmt.where(Score.game_name == game)
        stmt = stmt.order_by(Score.score.desc(), Score.id).limit(limit)
        return [row.to_dict() for row in self.session.execute(stmt).scalars()]
