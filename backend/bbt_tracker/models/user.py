from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from bbt_tracker import db

class User(db.Model):
    __tablename__ = 'users'

    # Primary key
    id = db.Column(db.Integer, primary_key=True)

    # Authentication fields
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    is_active = db.Column(db.Boolean, default=True)

    # Relationships
    cycles = db.relationship('Cycle', backref='user', lazy=True)
    settings = db.relationship('UserSettings', backref='user', uselist=False,
                               cascade='all, delete-orphan')

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check if provided password matches hash"""
        return check_password_hash(self.password_hash, password)

    def to_dict(self, include_settings=False):
        base_dict = {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'is_active': self.is_active
        }

        if include_settings and self.settings:
            base_dict['temperature_unit'] = self.settings.temperature_unit

        return base_dict

    def __repr__(self):
        return f'<User {self.username}>'
