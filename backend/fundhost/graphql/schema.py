"""GraphQL Schema — Strawberry schema and the FastAPI router serving it."""

import strawberry
from strawberry.fastapi import GraphQLRouter

from fundhost.graphql.context import get_context
from fundhost.graphql.extensions import FundhostErrorExtension
from fundhost.graphql.mutations import Mutation
from fundhost.graphql.queries import Query

schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[FundhostErrorExtension],
)

router = GraphQLRouter(schema, context_getter=get_context)
