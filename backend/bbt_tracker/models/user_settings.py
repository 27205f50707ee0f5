from datetime import datetime
from bbt_tracker import db
from bbt_tracker.services.cycle_constants import FAHRENHEIT


class UserSettings(db.Model):
    """Per-user display preferences. Created lazily on first read."""
    __tablename__ = 'user_settings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        unique=True
    )
    temperature_unit = db.Column(db.String(10), nullable=False, default=FAHRENHEIT)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'temperature_unit': self.temperature_unit,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<UserSettings user={self.user_id} unit={self.temperature_unit}>'
