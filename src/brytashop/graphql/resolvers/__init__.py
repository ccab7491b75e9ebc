"""Resolver package for the GraphQL schema.

Each module holds the async resolver functions for one area of the shop
(items, auth, users, cart, orders). The root Query and Mutation types import
them lazily.
"""
