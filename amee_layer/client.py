# amee_layer/client.py
import requests

from .config import Settings
from .errors import ExternalApiError
from .logging_utils import get_logger, log_operation
from .schemas import ProfileItem

logger = get_logger(__name__)

JSON_HEADERS = {"Accept": "application/json"}


def parse_profile_item(data):
    """Pull uid/name/total out of an AMEE profile item response.

    v2 responses nest the total under amount.value, v1 used totalAmount.
    """
    item = data.get("profileItem", data)
    amount = item.get("amount")
    if isinstance(amount, dict):
        total = amount.get("value", 0.0)
    else:
        total = item.get("totalAmount", amount)
    if not item.get("uid"):
        raise ExternalApiError("AMEE response has no profile item uid")
    return ProfileItem(uid=item["uid"], name=item.get("name"), total_amount=float(total or 0.0))


class AmeeConnection:
    def __init__(self, server, username=None, password=None, timeout=30.0):
        self.server = server.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.auth_token = None
        self.session = requests.Session()
        self._drill_down_cache = {}

    @classmethod
    def from_settings(cls, settings: Settings = None):
        settings = settings or Settings.from_env()
        return cls(settings.amee_server, settings.amee_username,
                   settings.amee_password, timeout=settings.amee_timeout)

    def authenticate(self):
        try:
            r = self.session.post(
                self.server + "/auth",
                data={"username": self.username, "password": self.password},
                headers=JSON_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalApiError(f"AMEE authentication failed: {e}", path="/auth") from e
        if not r.ok:
            raise ExternalApiError("AMEE authentication failed", r.status_code, "/auth")
        self.auth_token = r.headers.get("authToken")
        if not self.auth_token:
            raise ExternalApiError("AMEE authentication returned no token", r.status_code, "/auth")
        return self.auth_token

    def request(self, method, path, data=None, params=None):
        if self.auth_token is None and self.username:
            self.authenticate()
        r = self._send(method, path, data, params)
        if r.status_code == 401 and self.username:
            # token expired
            self.authenticate()
            r = self._send(method, path, data, params)
        if not r.ok:
            raise ExternalApiError(f"AMEE {method} failed", r.status_code, path)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as e:
            raise ExternalApiError("AMEE returned an unreadable response", r.status_code, path) from e

    def _send(self, method, path, data, params):
        headers = dict(JSON_HEADERS)
        if self.auth_token:
            headers["authToken"] = self.auth_token
        try:
            return self.session.request(
                method,
                self.server + path,
                data=data,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalApiError(f"AMEE {method} failed: {e}", path=path) from e

    # Profile items

    def create_profile_item(self, profile_category_path, data_item_uid, values) -> ProfileItem:
        payload = {"dataItemUid": data_item_uid, "representation": "full", **values}
        data = self.request("POST", profile_category_path, data=payload)
        item = parse_profile_item(data)
        log_operation(logger, "create_profile_item", "success", path=profile_category_path, uid=item.uid)
        return item

    def update_profile_item(self, profile_item_path, values) -> ProfileItem:
        payload = {"representation": "full", **values}
        data = self.request("PUT", profile_item_path, data=payload)
        return parse_profile_item(data)

    def delete_profile_item(self, profile_item_path):
        self.request("DELETE", profile_item_path)

    def get_profile_item(self, profile_item_path) -> ProfileItem:
        return parse_profile_item(self.request("GET", profile_item_path))

    # Data categories

    def drill_down(self, drill_down_path):
        """Resolve a drill down path to the data item uid of its first choice"""
        path, _, query = drill_down_path.partition("?")
        data = self.request("GET", path, params=query or None)
        choices = data.get("choices", {})
        if isinstance(choices, dict):
            choices = choices.get("choices", [])
        if not choices:
            raise ExternalApiError("AMEE drill down returned no choices", path=drill_down_path)
        first = choices[0]
        return first.get("value") or first.get("name")

    def data_category_uid(self, category):
        # drill down results never change for a path, so they are kept for the connection's lifetime
        key = category.drill_down_cache_key()
        if key not in self._drill_down_cache:
            self._drill_down_cache[key] = self.drill_down(category.drill_down_path())
        return self._drill_down_cache[key]
