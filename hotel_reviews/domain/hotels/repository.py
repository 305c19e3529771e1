"""Hotel repository - lookups used by the review and batch flows"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Hotel, User


class HotelRepository:
    """Repository for hotel and hotel staff lookups"""

    @staticmethod
    def get_hotel_by_id(db: Session, hotel_id: str) -> Optional[Hotel]:
        """Get a hotel by ID"""
        return db.query(Hotel).filter(Hotel.id == str(hotel_id)).first()

    @staticmethod
    def get_staff_user(db: Session, hotel_id: str) -> Optional[User]:
        """Get the staff user assigned to a hotel"""
        return (
            db.query(User)
            .filter(User.hotel_id == str(hotel_id), User.role == "user")
            .order_by(User.username)
            .first()
        )
