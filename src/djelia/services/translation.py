from djelia.adapters.http_dispatcher import AsyncHttpDispatcher, HttpDispatcher, decode_json
from djelia.domain import endpoints
from djelia.domain.models import SupportedLanguage, TranslationRequest, TranslationResponse, Versions


def _languages_from(data) -> list[SupportedLanguage]:
    return [SupportedLanguage.from_dict(item) for item in data or []]


class TranslationService:
    def __init__(self, dispatcher: HttpDispatcher) -> None:
        self._dispatcher = dispatcher

    def supported_languages(self, version: int = Versions.v1) -> list[SupportedLanguage]:
        info = endpoints.SUPPORTED_LANGUAGES
        response = self._dispatcher.request(info.method, info.url(version))
        return _languages_from(decode_json(response))

    def translate(self, request: TranslationRequest, version: int = Versions.v1) -> TranslationResponse:
        request.validate()
        info = endpoints.TRANSLATE
        response = self._dispatcher.request(info.method, info.url(version), json=request.to_dict())
        return TranslationResponse.from_dict(decode_json(response))


class AsyncTranslationService:
    def __init__(self, dispatcher: AsyncHttpDispatcher) -> None:
        self._dispatcher = dispatcher

    async def supported_languages(self, version: int = Versions.v1) -> list[SupportedLanguage]:
        info = endpoints.SUPPORTED_LANGUAGES
        response = await self._dispatcher.request(info.method, info.url(version))
        return _languages_from(decode_json(response))

    async def translate(self, request: TranslationRequest, version: int = Versions.v1) -> TranslationResponse:
        request.validate()
        info = endpoints.TRANSLATE
        response = await self._dispatcher.request(info.method, info.url(version), json=request.to_dict())
        return TranslationResponse.from_dict(decode_json(response))
