from datetime import datetime
from bbt_tracker import db


class Cycle(db.Model):
    """
    A user-defined fertility cycle: a start date, an optional end date and the
    ordered daily entries recorded in between.
    Only one cycle per user is active at a time.
    """
    __tablename__ = 'cycles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Cycle dates
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)  # Null while the cycle is running

    cycle_number = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    days = db.relationship(
        'CycleDay',
        backref='cycle',
        order_by='CycleDay.day_number',
        cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.Index('idx_cycles_user_active', 'user_id', 'is_active'),
    )

    @property
    def last_day(self):
        """Last recorded day by day number, or None."""
        return self.days[-1] if self.days else None

    def to_dict(self, include_days=True):
        result = {
            'id': self.id,
            'user_id': self.user_id,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'cycle_number': self.cycle_number,
            'is_active': self.is_active,
            'days_count': len(self.days),
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
        if include_days:
            result['days'] = [day.to_dict() for day in self.days]
        return result

    def __repr__(self):
        return f'<Cycle {self.id} #{self.cycle_number} user={self.user_id} start={self.start_date}>'
