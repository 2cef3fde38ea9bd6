# SPDX-License-Identifier: Apache-2.0
"""
vectordb-sdk Tests

Conformance tests for the vector database client: value types, connection
configuration, header injection, request dispatch, long-running operation
polling, bulk import and the asyncio facade.
"""
