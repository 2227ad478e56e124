"""Wire records for the Web3Signer keystore and Keymanager remote key endpoints."""
from typing import Annotated, Optional
from pydantic import BaseModel, Field, StrictBool, StrictStr


class SignerKeystore(BaseModel):
    validating_pubkey: Annotated[StrictStr, Field(min_length=1)]
    derivation_path: Optional[StrictStr] = None
    readonly: StrictBool = False


class SignerKeystoreListing(BaseModel):
    data: list[SignerKeystore]


class RemoteKey(BaseModel):
    pubkey: Annotated[StrictStr, Field(min_length=1)]
    url: Optional[StrictStr] = None
    readonly: StrictBool = False


class RemoteKeyListing(BaseModel):
    data: list[RemoteKey]


class ImportRemoteKey(BaseModel):
    pubkey: StrictStr
    url: StrictStr


class ImportRemoteKeysRequest(BaseModel):
    remote_keys: list[ImportRemoteKey]


class DeleteRemoteKeysRequest(BaseModel):
    pubkeys: list[StrictStr]


class KeyStatus(BaseModel):
    status: Annotated[StrictStr, Field(min_length=1)]
    message: Optional[StrictStr] = None


class KeyStatusResponse(BaseModel):
    data: list[KeyStatus]
