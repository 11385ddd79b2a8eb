"""
Endpoints de medicinas
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.medicine import (
    MedicineCreate,
    MedicineUpdate,
    MedicineResponse,
    InventoryList,
    InventoryUpdate,
    InventoryUpdateResponse
)
from app.services.medicine_service import MedicineService

router = APIRouter()


@router.get("/", response_model=List[MedicineResponse])
async def list_medicines(
        active: Optional[bool] = Query(None, description="Filtrar por activas/inactivas"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Listar medicinas del usuario
    """
    return MedicineService(db, current_user.id).get_medicines(active=active)


@router.post("/", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
async def create_medicine(
        medicine_data: MedicineCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Crear nueva medicina
    """
    return MedicineService(db, current_user.id).create_medicine(medicine_data)


@router.get("/inventory", response_model=InventoryList)
async def get_inventory_status(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Inventario de las medicinas activas (inventario bajo primero)
    """
    medicines = MedicineService(db, current_user.id).get_inventory_status()
    return {"count": len(medicines), "data": medicines}


@router.put("/{medicine_id}/inventory", response_model=InventoryUpdateResponse)
async def update_inventory(
        medicine_id: int,
        inventory_update: InventoryUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Reponer (refill), ajustar (adjust) o fijar (set) el inventario
    """
    result = MedicineService(db, current_user.id).update_inventory(medicine_id, inventory_update)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada"
        )

    medicine, message = result
    return {"message": message, "medicine": medicine}


@router.get("/{medicine_id}", response_model=MedicineResponse)
async def get_medicine(
        medicine_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Obtener una medicina
    """
    medicine = MedicineService(db, current_user.id).get_medicine_by_id(medicine_id)
    if not medicine:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada"
        )

    return medicine


@router.put("/{medicine_id}", response_model=MedicineResponse)
async def update_medicine(
        medicine_id: int,
        medicine_update: MedicineUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Actualizar medicina
    """
    medicine = MedicineService(db, current_user.id).update_medicine(medicine_id, medicine_update)
    if not medicine:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada"
        )

    return medicine


@router.delete("/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medicine(
        medicine_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Eliminar medicina
    """
    if not MedicineService(db, current_user.id).delete_medicine(medicine_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada"
        )
