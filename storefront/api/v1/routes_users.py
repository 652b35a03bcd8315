from typing import Any, Dict, List
from fastapi import APIRouter, Body, Depends
from storefront.api.deps import get_account_service, get_order_workflow
from storefront.api.v1.schemas import MessageResponse
from storefront.services.accounts import AccountService
from storefront.services.orders import OrderWorkflow

router = APIRouter()

@router.put("/user/{user_id}/personal", response_model=MessageResponse)
def update_personal_info(
    user_id: int,
    personal_info: Dict[str, Any] = Body(...),
    accounts: AccountService = Depends(get_account_service),
):
    accounts.update_personal_info(user_id, personal_info)
    return {"message": "Personal info updated successfully"}

@router.get("/user/{user_id}/orders", response_model=List[Dict[str, Any]])
def list_orders(user_id: int, workflow: OrderWorkflow = Depends(get_order_workflow)):
    return workflow.list_orders(user_id)
