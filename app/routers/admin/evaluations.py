from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status

from app.middlewares.auth_middleware import require_admin
from app.schemas.admin.application_schemas import (
    CreateEvaluationRequest,
    UpdateEvaluationRequest,
)
from app.services.admin.review_service import ReviewService, get_review_service
from app.utils.responses import ResponseBuilder

evaluations_router = APIRouter(dependencies=[Depends(require_admin)])


@evaluations_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Record an evaluation",
    description="Append an evaluation to an application's history. Scores are not range checked.",
)
async def create_evaluation(
    request: Request,
    evaluation_data: CreateEvaluationRequest,
    review_service: ReviewService = Depends(get_review_service),
):
    evaluation = await review_service.create_evaluation(evaluation_data)

    return ResponseBuilder.success(
        request=request,
        data=evaluation.model_dump(by_alias=True),
        message="Evaluation created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@evaluations_router.put("/{evaluation_id}", summary="Edit an evaluation")
async def update_evaluation(
    request: Request,
    evaluation_data: UpdateEvaluationRequest,
    evaluation_id: Annotated[int, Path(description="Evaluation ID")],
    review_service: ReviewService = Depends(get_review_service),
):
    evaluation = await review_service.update_evaluation(evaluation_id, evaluation_data)

    return ResponseBuilder.success(
        request=request,
        data=evaluation.model_dump(by_alias=True),
        message="Evaluation updated successfully",
    )
