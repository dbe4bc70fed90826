from fastapi import APIRouter

router = APIRouter(
    prefix="/v1/analytics",
    tags=["Analytics"]
)


# Aggregation is not implemented; these keep the public route map stable.

@router.get("/overview")
async def get_analytics_overview():
    return {"message": "analytics overview endpoint"}


@router.get("/sales")
async def get_sales_analytics():
    return {"message": "sales analytics endpoint"}


@router.get("/users")
async def get_user_analytics():
    return {"message": "user analytics endpoint"}
