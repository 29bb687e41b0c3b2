"""
WhatsApp template handler.

Sends template messages and exposes the template administration endpoints:
- POST /PHONE_NUMBER_ID/messages (send)
- GET/POST/DELETE /WABA_ID/message_templates (list/create/delete)
- GET/POST /TEMPLATE_ID (get/update)
"""

from typing import Any

from wacloud.core.logging.logger import get_logger
from wacloud.messaging.whatsapp.builders.payload_builder import build_template_payload
from wacloud.messaging.whatsapp.client.whatsapp_client import (
    WhatsAppClient,
    WhatsAppResponse,
)
from wacloud.messaging.whatsapp.models.basic_models import ErrorKind, MessageResult
from wacloud.messaging.whatsapp.models.template_models import TemplateOperationResult
from wacloud.messaging.whatsapp.utils.error_helpers import (
    classify_error,
    error_code_for,
    handle_whatsapp_error,
    message_result_from_response,
    platform_error_from_response,
)


class WhatsAppTemplateHandler:
    """
    Handler for WhatsApp template operations.

    Administrative calls are plain passthroughs; they need business_account_id
    (list/create/delete) in the client configuration.
    """

    def __init__(self, client: WhatsAppClient, tenant_id: str):
        """Initialize template handler.

        Args:
            client: Configured WhatsApp client for API operations
            tenant_id: Tenant identifier for logging context
        """
        self.client = client
        self._tenant_id = tenant_id
        self.logger = get_logger(__name__)

    async def send_template(
        self,
        to: str,
        template_name: str,
        language: str = "en_US",
        header: list | None = None,
        body: list | None = None,
        buttons: list[dict[str, Any]] | None = None,
    ) -> MessageResult:
        """
        Send an approved template message.

        Args:
            to: Recipient phone number
            template_name: Name of the approved template
            language: Template language code
            header: Header parameters, in order
            body: Body parameters, in order
            buttons: Button components, passed through unmodified

        Returns:
            MessageResult with operation status and the parsed response
        """
        try:
            payload = build_template_payload(
                to,
                template_name,
                language=language,
                header=header,
                body=body,
                buttons=buttons,
            )

            self.logger.debug(f"Sending template '{template_name}' to {to}")
            response = await self.client.post_request(payload)

            return message_result_from_response(
                response,
                operation=f"send template '{template_name}'",
                recipient=to,
                tenant_id=self._tenant_id,
                logger=self.logger,
            )

        except Exception as e:
            return handle_whatsapp_error(
                error=e,
                operation=f"send template '{template_name}'",
                recipient=to,
                tenant_id=self._tenant_id,
                logger=self.logger,
            )

    # Administration

    def _business_account_id(self) -> str | None:
        return self.client.config.business_account_id or None

    def _missing_business_account(self) -> TemplateOperationResult:
        return TemplateOperationResult(
            success=False,
            error="business_account_id is required for template administration",
            error_code="MISSING_BUSINESS_ACCOUNT_ID",
            error_kind=ErrorKind.LOCAL,
            tenant_id=self._tenant_id,
        )

    def _operation_result(
        self,
        response: WhatsAppResponse,
        operation: str,
        template_id: str | None = None,
        template_name: str | None = None,
    ) -> TemplateOperationResult:
        if not response.ok:
            message, code = platform_error_from_response(response)
            self.logger.error(f"Platform rejected {operation}: {message}")
            return TemplateOperationResult(
                success=False,
                error=message,
                error_code=code,
                error_kind=ErrorKind.PLATFORM,
                status_code=response.status,
                api_response=response.data,
                template_id=template_id,
                template_name=template_name,
                tenant_id=self._tenant_id,
            )

        self.logger.info(f"{operation.capitalize()} succeeded")
        return TemplateOperationResult(
            success=True,
            status_code=response.status,
            api_response=response.data,
            template_id=template_id or response.data.get("id"),
            template_name=template_name,
            tenant_id=self._tenant_id,
        )

    def _operation_failure(
        self, error: Exception, operation: str, **fields: Any
    ) -> TemplateOperationResult:
        self.logger.exception(f"Failed to {operation}: {error}")
        return TemplateOperationResult(
            success=False,
            error=str(error),
            error_code=error_code_for(error),
            error_kind=classify_error(error),
            tenant_id=self._tenant_id,
            **fields,
        )

    async def list_templates(
        self, params: dict[str, Any] | None = None
    ) -> TemplateOperationResult:
        """List the account's templates; params go straight to the Graph API (fields, limit, after...)."""
        waba_id = self._business_account_id()
        if not waba_id:
            return self._missing_business_account()

        try:
            response = await self.client.get_request(
                url=self.client.url_builder.get_templates_url(waba_id), params=params
            )
            return self._operation_result(response, "list templates")
        except Exception as e:
            return self._operation_failure(e, "list templates")

    async def get_template(self, template_id: str) -> TemplateOperationResult:
        try:
            response = await self.client.get_request(
                url=self.client.url_builder.get_template_url(template_id)
            )
            return self._operation_result(
                response, f"get template {template_id}", template_id=template_id
            )
        except Exception as e:
            return self._operation_failure(
                e, f"get template {template_id}", template_id=template_id
            )

    async def create_template(
        self, template: dict[str, Any]
    ) -> TemplateOperationResult:
        """Register a template ({"name", "language", "category", "components"})."""
        waba_id = self._business_account_id()
        if not waba_id:
            return self._missing_business_account()

        name = template.get("name")
        try:
            response = await self.client.post_request(
                template, custom_url=self.client.url_builder.get_templates_url(waba_id)
            )
            return self._operation_result(
                response, f"create template '{name}'", template_name=name
            )
        except Exception as e:
            return self._operation_failure(
                e, f"create template '{name}'", template_name=name
            )

    async def update_template(
        self, template_id: str, components: list[dict[str, Any]]
    ) -> TemplateOperationResult:
        try:
            response = await self.client.post_request(
                {"components": components},
                custom_url=self.client.url_builder.get_template_url(template_id),
            )
            return self._operation_result(
                response, f"update template {template_id}", template_id=template_id
            )
        except Exception as e:
            return self._operation_failure(
                e, f"update template {template_id}", template_id=template_id
            )

    async def delete_template(
        self, name: str, template_id: str | None = None
    ) -> TemplateOperationResult:
        """Delete a template by name (all languages), or one version when template_id is given."""
        waba_id = self._business_account_id()
        if not waba_id:
            return self._missing_business_account()

        params = {"name": name}
        if template_id:
            params["hsm_id"] = template_id

        try:
            response = await self.client.delete_request(
                url=self.client.url_builder.get_templates_url(waba_id), params=params
            )
            return self._operation_result(
                response,
                f"delete template '{name}'",
                template_id=template_id,
                template_name=name,
            )
        except Exception as e:
            return self._operation_failure(
                e,
                f"delete template '{name}'",
                template_id=template_id,
                template_name=name,
            )
