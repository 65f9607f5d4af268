from typing import Optional, Union
from pydantic import BaseModel, Field


class BridgeQuoteRequest(BaseModel):
    source_chain_id: int = Field(description="Chain the funds leave from")
    destination_chain_id: int = Field(description="Chain the funds arrive on")
    token: str = Field(description="Token symbol or contract address on the source chain")
    amount: Union[str, float] = Field(description="Amount in whole token units")
    recipient: Optional[str] = Field(default=None, description="Destination address; defaults to the connected account")


class BridgeExecuteRequest(BaseModel):
    quote_id: str = Field(description="Identifier of the current quote to execute")


class SwitchChainRequest(BaseModel):
    chain_id: int = Field(description="Target chain id")


class PreferencesUpdate(BaseModel):
    source_chain_id: Optional[int] = Field(default=None, description="Last-used source chain")
    destination_chain_id: Optional[int] = Field(default=None, description="Last-used destination chain")
    flip: bool = Field(default=False, description="Swap source and destination after applying the update")
