# specver/services/gcp_clients.py
from google.cloud import firestore


def make_firestore_client(project: str | None = None) -> firestore.Client:
    # no module-level cache: the store owns the client and closes it
    return firestore.Client(project=project)
