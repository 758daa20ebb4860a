from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from typing import Optional

from ...config import settings
from ...core.redirects import remove_query_args
from ...core.security import create_nonce, user_id_of
from ...models.checkout import CHECKOUT_ACTION, CheckoutSubmission, CheckoutUser
from ...services.button_service import ButtonRenderer, parse_button_attributes
from ...services.checkout_service import CheckoutService, RESULT_PARAMS
from ...services.result_service import ResultService
from ...utils.templates import render_template
from ..dependencies import (
    get_button_renderer,
    get_checkout_service,
    get_optional_user,
    get_result_service,
)

router = APIRouter()


def render_button_for(
    request: Request,
    renderer: ButtonRenderer,
    user: Optional[CheckoutUser],
    action_url: str
) -> str:
    attrs = parse_button_attributes(request.query_params)
    nonce = create_nonce(CHECKOUT_ACTION, user_id_of(user))
    return renderer.render(attrs, nonce, action_url)


async def render_page(
    request: Request,
    renderer: ButtonRenderer,
    result_service: ResultService,
    user: Optional[CheckoutUser]
) -> HTMLResponse:
    action_url = remove_query_args(str(request.url), RESULT_PARAMS)
    button = render_button_for(request, renderer, user, action_url)
    notice = await result_service.render_notice(request.query_params)

    return HTMLResponse(render_template("page.html", {
        "title": settings.PROJECT_NAME,
        "button": button,
        "notice": notice,
    }))


@router.get("", response_class=HTMLResponse, name="checkout_page")
async def checkout_page(
    request: Request,
    user: Optional[CheckoutUser] = Depends(get_optional_user),
    renderer: ButtonRenderer = Depends(get_button_renderer),
    result_service: ResultService = Depends(get_result_service)
):
    """
    Payment page: the checkout button plus the result notice of a returning visitor
    """
    return await render_page(request, renderer, result_service, user)


@router.post("", response_class=HTMLResponse)
async def submit_checkout(
    request: Request,
    user: Optional[CheckoutUser] = Depends(get_optional_user),
    checkout_service: CheckoutService = Depends(get_checkout_service),
    renderer: ButtonRenderer = Depends(get_button_renderer),
    result_service: ResultService = Depends(get_result_service)
):
    """
    Checkout form submission. Ends in a redirect to Stripe or back to this page.
    """
    form = await request.form()
    submission = CheckoutSubmission(
        method=request.method,
        form={key: value for key, value in form.items() if isinstance(value, str)},
        current_url=str(request.url),
        user=user
    )

    response = await checkout_service.handle_submission(submission)
    if response is not None:
        return response

    # Not a checkout submission: behave like a plain page view
    return await render_page(request, renderer, result_service, user)


@router.get("/button", response_class=HTMLResponse)
async def checkout_button(
    request: Request,
    user: Optional[CheckoutUser] = Depends(get_optional_user),
    renderer: ButtonRenderer = Depends(get_button_renderer)
):
    """
    Button markup only, for embedding in other pages. Attributes come from the query string.
    """
    action_url = str(request.url_for("checkout_page"))
    return HTMLResponse(render_button_for(request, renderer, user, action_url))
