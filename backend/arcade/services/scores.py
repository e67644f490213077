from flask import current_app
from sqlalchemy.dialects import postgresql, sqlite

from arcade.models import Score

# Dialects whose INSERT supports ON CONFLICT ... DO UPDATE ... WHERE
_UPSERT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


class ScoreService:
    def __init__(self, session):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise RuntimeError(f'best-score upsert is not supported on {dialect}')

    def submit(self, user, game_name: str, score: int) -> bool:
        """Keep the user's best score for a game.

        Inserts the first score for (user, game) and afterwards only
        overwrites it with a strictly greater one, in one statement so
        concurrent submissions cannot lose a high score. Returns True when a
        row was written.
        """
        table = Score.__table__
        stmt = self._insert()(table).values(user_id=user.id, game_name=game_name, score=score)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.game_name],
            set_={'score': stmt.excluded.score},
            where=stmt.excluded.score > table.c.score,
        )
        result = self.session.execute(stmt)
        self.session.commit()

        updated = result.rowcount > 0
        current_app.logger.info(
            f"[score] user={user.username} game={game_name} score={score} updated={updated}"
        )
        return updated
