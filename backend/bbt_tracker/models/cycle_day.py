from datetime import datetime
from bbt_tracker import db


class CycleDay(db.Model):
    """
    A single day's fertility observations within a cycle.

    BBT is stored in Fahrenheit regardless of the user's display unit.
    bbt_time is the "HH:MM" time the temperature was taken.
    """
    __tablename__ = 'cycle_days'

    id = db.Column(db.Integer, primary_key=True)
    cycle_id = db.Column(
        db.Integer,
        db.ForeignKey('cycles.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    day_number = db.Column(db.Integer, nullable=False)
    date = db.Column(db.Date, nullable=False)
    day_of_week = db.Column(db.String(10), nullable=False)

    # Temperature
    bbt = db.Column(db.Float, nullable=True)
    bbt_time = db.Column(db.String(5), nullable=True)
    exclude_from_interpretation = db.Column(db.Boolean, nullable=False, default=False)

    had_intercourse = db.Column(db.Boolean, nullable=False, default=False)

    # Observations
    cervical_appearance = db.Column(db.String(10), nullable=True)
    cervical_sensation = db.Column(db.String(10), nullable=True)
    menstrual_flow = db.Column(db.String(12), nullable=True)
    opk_result = db.Column(db.String(10), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('cycle_id', 'day_number', name='uq_cycle_days_cycle_day_number'),
        db.Index('idx_cycle_days_cycle_date', 'cycle_id', 'date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'cycle_id': self.cycle_id,
            'day_number': self.day_number,
            'date': self.date.isoformat() if self.date else None,
            'day_of_week': self.day_of_week,
            'bbt': self.bbt,
            'bbt_time': self.bbt_time,
            'exclude_from_interpretation': self.exclude_from_interpretation,
            'had_intercourse': self.had_intercourse,
            'cervical_appearance': self.cervical_appearance,
            'cervical_sensation': self.cervical_sensation,
            'menstrual_flow': self.menstrual_flow,
            'opk_result': self.opk_result,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<CycleDay {self.id} - Cycle {self.cycle_id} - Day {self.day_number}>'
