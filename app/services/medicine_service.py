"""
Servicio de gestión de medicinas
"""
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from datetime import datetime
import logging

from app.models.medicine import Medicine
from app.schemas.medicine import InventoryAction, InventoryUpdate, MedicineCreate, MedicineUpdate

logger = logging.getLogger(__name__)


class MedicineService:
    """Catálogo de medicinas de un usuario"""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def get_medicines(self, active: Optional[bool] = None) -> List[Medicine]:
        """Obtener medicinas del usuario"""
        query = self.db.query(Medicine).filter(Medicine.user_id == self.user_id)

        if active is not None:
            query = query.filter(Medicine.is_active == active)

        return query.order_by(Medicine.name).all()

    def get_medicine_by_id(self, medicine_id: int) -> Optional[Medicine]:
        """Obtener medicina por ID (solo si pertenece al usuario)"""
        return self.db.query(Medicine).filter(
            Medicine.id == medicine_id,
            Medicine.user_id == self.user_id
        ).first()

    def create_medicine(self, medicine_data: MedicineCreate) -> Medicine:
        """Crear nueva medicina"""
        db_medicine = Medicine(user_id=self.user_id, **medicine_data.dict())

        self.db.add(db_medicine)
        self.db.commit()
        self.db.refresh(db_medicine)

        logger.info(f"Medicina creada: {db_medicine.full_name} (ID: {db_medicine.id})")
        return db_medicine

    def update_medicine(
            self,
            medicine_id: int,
            medicine_update: MedicineUpdate
    ) -> Optional[Medicine]:
        """Actualizar medicina"""
        medicine = self.get_medicine_by_id(medicine_id)
        if not medicine:
            return None

        update_data = medicine_update.dict(exclude_unset=True)

        for field, value in update_data.items():
            if hasattr(medicine, field):
                setattr(medicine, field, value)

        self.db.commit()
        self.db.refresh(medicine)

        logger.info(f"Medicina actualizada: {medicine.full_name} (ID: {medicine.id})")
        return medicine

    def delete_medicine(self, medicine_id: int) -> bool:
        """Eliminar medicina (y sus registros)"""
        medicine = self.get_medicine_by_id(medicine_id)
        if not medicine:
            return False

        full_name = medicine.full_name
        self.db.delete(medicine)
        self.db.commit()

        logger.info(f"Medicina eliminada: {full_name} (ID: {medicine_id})")
        return True

    # ==== INVENTARIO ====

    def get_inventory_status(self) -> List[Medicine]:
        """Medicinas activas; primero las de inventario bajo, luego por días restantes"""
        medicines = self.get_medicines(active=True)
        return sorted(medicines, key=lambda m: (not m.is_low_inventory, m.days_remaining))

    def update_inventory(
            self,
            medicine_id: int,
            inventory_update: InventoryUpdate
    ) -> Optional[Tuple[Medicine, str]]:
        """Aplicar refill/adjust/set; None si la medicina no es del usuario"""
        medicine = self.get_medicine_by_id(medicine_id)
        if not medicine:
            return None

        amount = inventory_update.amount
        if inventory_update.action == InventoryAction.REFILL:
            medicine.refill(amount)
            message = f"{medicine.name} repuesta: {medicine.inventory_count:g} unidades"
        elif inventory_update.action == InventoryAction.ADJUST:
            medicine.inventory_count = max(0.0, medicine.inventory_count + amount)
            medicine.last_refill_date = datetime.utcnow()
            message = f"Inventario de {medicine.name} ajustado en {amount:g} unidades"
        else:
            medicine.inventory_count = max(0.0, amount)
            medicine.last_refill_date = datetime.utcnow()
            message = f"Inventario de {medicine.name} fijado en {amount:g} unidades"

        self.db.commit()
        self.db.refresh(medicine)

        logger.info(f"📦 {message} (ID: {medicine.id})")
        return medicine, message
