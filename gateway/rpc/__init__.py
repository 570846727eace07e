"""gRPC access to the Boardbots service."""
