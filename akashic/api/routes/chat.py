from fastapi import APIRouter

from akashic.api.deps import OptionalUser, ServicesDep
from akashic.models.messages import ChatChannel
from akashic.schemas import ChatExchangeResponse, ChatMessageResponse, KeeperMessageRequest, OracleMessageRequest

router = APIRouter(tags=["chat"])


@router.get("/oracle/{session_key}", response_model=list[ChatMessageResponse])
async def oracle_history(session_key: str, services: ServicesDep):
    return await services.chat.history(ChatChannel.ORACLE, session_key)


@router.post("/oracle/message", response_model=ChatExchangeResponse)
async def consult_oracle(data: OracleMessageRequest, services: ServicesDep, user: OptionalUser):
    """Free for a few consultations a day when anonymous; costs Mana when signed in."""
    user_message, reply = await services.chat.consult_oracle(
        data.session_key, data.message, user.id if user is not None else None
    )
    return ChatExchangeResponse(
        user_message=ChatMessageResponse.model_validate(user_message), reply=ChatMessageResponse.model_validate(reply)
    )


@router.get("/keeper/{session_key}", response_model=list[ChatMessageResponse])
async def keeper_history(session_key: str, services: ServicesDep):
    return await services.chat.history(ChatChannel.KEEPER, session_key)


@router.post("/keeper/message", response_model=ChatExchangeResponse)
async def ask_keeper(data: KeeperMessageRequest, services: ServicesDep):
    user_message, reply = await services.chat.ask_keeper(data.session_key, data.content)
    return ChatExchangeResponse(
        user_message=ChatMessageResponse.model_validate(user_message), reply=ChatMessageResponse.model_validate(reply)
    )
