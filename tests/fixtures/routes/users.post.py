from pydantic import BaseModel

from routespec import RouteResponse, define_meta


class CreateUser(BaseModel):
    name: str
    email: str


class User(BaseModel):
    id: int
    name: str
    email: str


meta = define_meta(
    operation_id="createUser",
    title="Create user",
    body=CreateUser,
    responses={201: User},
)


@meta.define_event_handler
async def handler(path, query, body: CreateUser):
    user = User(id=3, name=body.name, email=body.email)
    return RouteResponse(user, 201, {"Location": "/users/3"})
