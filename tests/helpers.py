import json


def send(client, method, path, payload=None):
    """Issue a JSON request and return (status, decoded body)."""
    handler = getattr(client, method.lower())
    response = handler(path, data=json.dumps(payload if payload is not None else {}),
                       content_type='application/json')
    return response.status_code, response.json()
