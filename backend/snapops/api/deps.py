from snapops.core.azure_client import AzureClient


def get_azure_client() -> AzureClient:
    """New client per request; each run switches subscriptions on its own session"""
    return AzureClient()
