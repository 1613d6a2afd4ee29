from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash
from ..auth.roles import Identity, Role
from ..db.session import get_session
from ..errors import NotFoundError, ValidationError
from ..models.customer import Customer
from ..models.user import User
from ..utils.validators import require_fields, to_decimal
from .logging import log_event


MIN_PASSWORD_LENGTH = 8


class AccountService:
    """User registration, login and role management."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def register_user(self, *, first_name: str, last_name: str, email: str, password: str) -> Dict:
        data = {"first_name": first_name, "last_name": last_name, "email": email, "password": password}
        require_fields(data, data.keys(), {"first_name": "First name", "last_name": "Last name", "email": "Email", "password": "Password"})
        email = email.strip().lower()
        if "@" not in email:
            raise ValidationError("A valid email address is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        try:
            with self._session_factory() as session:
                user = User(
                    user_firstname=first_name.strip(),
                    user_lastname=last_name.strip(),
                    user_email=email,
                    user_password=generate_password_hash(password),
                    user_role=Role.CLIENT.label,
                )
                session.add(user)
                session.flush()
                dto = user.to_dict()
        except IntegrityError:
            raise ValidationError("An account with this email already exists") from None
        log_event("info", "account.registered", user_id=dto["user_id"])
        return dto

    def authenticate(self, email: str, password: str) -> Optional[Dict]:
        """Return the user's public fields when the credentials match, else None."""
        if not email or not password:
            return None
        with self._session_factory() as session:
            user = session.execute(
                select(User).where(func.lower(User.user_email) == email.strip().lower())
            ).scalar_one_or_none()
            if user is None or not check_password_hash(user.user_password, password):
                log_event("warning", "account.login_failed", email=email.strip().lower())
                return None
            return user.to_dict()

    def get_user(self, user_id: int) -> Optional[Dict]:
        with self._session_factory() as session:
            user = session.get(User, user_id)
            return user.to_dict() if user else None

    def set_role(self, user_id: int, role: str) -> Dict:
        parsed = Role.parse(role)
        with self._session_factory() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            user.user_role = parsed.label
            dto = user.to_dict()
        log_event("info", "account.role_changed", user_id=user_id, role=parsed.label)
        return dto

    @staticmethod
    def identity_for(user: Dict) -> Identity:
        return Identity(user_id=int(user["user_id"]), role=Role.parse(user["user_role"]))


class CustomerService:
    """Trade customer records kept by back-office staff."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def list_customers(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.execute(
                select(Customer).order_by(Customer.created_date.desc(), Customer.customer_id.desc())
            ).scalars()
            return [c.to_dict() for c in rows]

    def create_customer(self, fields: Dict) -> Dict:
        require_fields(
            fields,
            ("company_name", "contact_person", "contact_email"),
            {"company_name": "Company name", "contact_person": "Contact person", "contact_email": "Contact email"},
        )
        credit_limit = to_decimal(fields.get("credit_limit") or 0, "Credit limit")
        if credit_limit < 0:
            raise ValidationError("Credit limit must be non-negative")
        with self._session_factory() as session:
            customer = Customer(
                company_name=fields["company_name"].strip(),
                contact_person=fields["contact_person"].strip(),
                contact_email=fields["contact_email"].strip(),
                contact_phone=fields.get("contact_phone"),
                address=fields.get("address"),
                tax_number=fields.get("tax_number"),
                payment_terms=fields.get("payment_terms") or "Net 30",
                credit_limit=credit_limit,
            )
            session.add(customer)
            session.flush()
            dto = customer.to_dict()
        log_event("info", "customer.created", customer_id=dto["customer_id"])
        return dto
