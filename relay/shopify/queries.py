"""GraphQL documents used against the Shopify Admin API."""

from __future__ import annotations

BULK_OPERATION_FRAGMENT = """
fragment BulkOperationFields on BulkOperation {
  id
  status
  query
  errorCode
  createdAt
  completedAt
  objectCount
  fileSize
  type
  url
  partialDataUrl
}
"""

GET_BULK_OPERATION_QUERY = (
    """
query GetBulkOperation($id: ID!) {
  node(id: $id) {
    ... on BulkOperation {
      ...BulkOperationFields
    }
  }
}
"""
    + BULK_OPERATION_FRAGMENT
)

FULFILLMENT_ORDERS_REROUTE_MUTATION = """
mutation fulfillmentOrdersReroute(
  $excludedLocationIds: [ID!]
  $fulfillmentOrderIds: [ID!]!
  $includedLocationIds: [ID!]
) {
  fulfillmentOrdersReroute(
    excludedLocationIds: $excludedLocationIds
    fulfillmentOrderIds: $fulfillmentOrderIds
    includedLocationIds: $includedLocationIds
  ) {
    movedFulfillmentOrders {
      id
      status
      assignedLocation {
        location {
          id
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

_WEBHOOK_FIELDS = """
  id
  topic
  endpoint {
    ... on WebhookHttpEndpoint {
      callbackUrl
    }
  }
"""

GET_WEBHOOK_SUBSCRIPTION_QUERY = f"""
query webhookSubscription($id: ID!) {{
  webhookSubscription(id: $id) {{{_WEBHOOK_FIELDS}  }}
}}
"""

LIST_WEBHOOK_SUBSCRIPTIONS_QUERY = f"""
query webhookSubscriptions($first: Int!) {{
  webhookSubscriptions(first: $first) {{
    edges {{
      node {{{_WEBHOOK_FIELDS}      }}
    }}
  }}
}}
"""

CREATE_WEBHOOK_SUBSCRIPTION_MUTATION = f"""
mutation webhookSubscriptionCreate(
  $topic: WebhookSubscriptionTopic!
  $webhookSubscription: WebhookSubscriptionInput!
) {{
  webhookSubscriptionCreate(topic: $topic, webhookSubscription: $webhookSubscription) {{
    webhookSubscription {{{_WEBHOOK_FIELDS}    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""

UPDATE_WEBHOOK_SUBSCRIPTION_MUTATION = f"""
mutation webhookSubscriptionUpdate($id: ID!, $webhookSubscription: WebhookSubscriptionInput!) {{
  webhookSubscriptionUpdate(id: $id, webhookSubscription: $webhookSubscription) {{
    webhookSubscription {{{_WEBHOOK_FIELDS}    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""
