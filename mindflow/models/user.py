from mindflow.extensions import db, bcrypt
from .base import TimestampMixin
from .enums import UserRole, enum_values


class User(db.Model, TimestampMixin):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # patient, doctor or admin
    role = db.Column(
        db.Enum(UserRole, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
        index=True,
    )

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_patient(self):
        return self.role == UserRole.PATIENT

    def is_doctor(self):
        return self.role == UserRole.DOCTOR

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role.value,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f"<User {self.email} - {self.role.value}>"
