from arcade import db, bcrypt
from flask_login import UserMixin


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=True)
    password_hash = db.Column(db.String(128), nullable=False)
    # Deleting a user removes their scores as well
    scores = db.relationship(
        'Score',
        back_populates='user',
        cascade='all, delete-orphan',
    )

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
        }


class Score(db.Model):
    __tablename__ = 'scores'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'game_name', name='uq_scores_user_game'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    game_name = db.Column(db.String(64), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    user = db.relationship('User', back_populates='scores')

    def to_dict(self):
        return {
            'username': self.user.username,
            'game_name': self.game_name,
            'score': self.score,
        }
