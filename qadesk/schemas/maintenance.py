from qadesk.schemas.base import CamelModel


class PurgeResult(CamelModel):
    sessions_deleted: int
    reset_tokens_deleted: int
