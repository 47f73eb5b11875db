# task_manager_client/api.py

import requests

# Base URL of the FastAPI backend
API_URL = "http://localhost:8000"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, code: str | None = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code} {code or ''} {message}".strip())


class TaskManagerClient:
    """
    Client for the task manager API. The underlying session keeps the
    session cookie, so login/signup authenticate every later call.
    """

    def __init__(self, base_url: str = API_URL, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = self.session.request(method, f"{self.base_url}{path}", **kwargs)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not 200 <= response.status_code < 300:
            raise ApiError(
                response.status_code,
                data.get("message", "Request failed") if isinstance(data, dict) else "Request failed",
                data.get("code") if isinstance(data, dict) else None,
            )
        return data

    # -------------------------------
    # Authentication
    # -------------------------------

    def signup(self, first_name, last_name, email, password):
        """
        Registers a new account and returns the created user.
        """
        return self._request("POST", "/api/auth/signup", json={
            "firstName": first_name,
            "lastName": last_name,
            "emailAddress": email,
            "password": password,
        })["user"]

    def login(self, email, password):
        return self._request("POST", "/api/auth/login", json={
            "emailAddress": email,
            "password": password,
        })["user"]

    def logout(self):
        return self._request("POST", "/api/auth/logout")

    def me(self):
        return self._request("GET", "/api/auth/me")["user"]

    # -------------------------
    # Tasks
    # -------------------------

    def list_tasks(self):
        return self._request("GET", "/api/tasks")["tasks"]

    def task_stats(self):
        return self._request("GET", "/api/tasks/stats")["stats"]

    def get_task(self, task_id):
        return self._request("GET", f"/api/tasks/{task_id}")["task"]

    def create_task(self, title, priority, description=None, due_date=None):
        payload = {"title": title, "priority": priority}
        if description is not None:
            payload["description"] = description
        if due_date is not None:
            payload["dueDate"] = due_date
        return self._request("POST", "/api/tasks", json=payload)["task"]

    def update_task(self, task_id, **fields):
        """
        Sends only the given fields. Accepts the API's camelCase names
        (dueDate, isCompleted) or their snake_case forms.
        """
        renamed = {"due_date": "dueDate", "is_completed": "isCompleted"}
        payload = {renamed.get(k, k): v for k, v in fields.items()}
        return self._request("PUT", f"/api/tasks/{task_id}", json=payload)["task"]

    def delete_task(self, task_id):
        return self._request("DELETE", f"/api/tasks/{task_id}")

    def toggle_task(self, task_id):
        return self._request("PATCH", f"/api/tasks/{task_id}/toggle")["task"]
