from pydantic import BaseModel

from routespec import define_meta


class Health(BaseModel):
    status: str


meta = define_meta(operation_id="getHealth", response=Health)


@meta.define_event_handler
def handler(path, query, body):
    # Sync handlers run in the threadpool
    return Health(status="ok")
