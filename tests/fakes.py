"""In-memory stand-in for the parts of the supabase-py client the services use."""
import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)

# Column defaults the database would fill in
TABLE_DEFAULTS = {
    "trip_members": {"joined_at": None},
    "date_proposals": {"is_finalized": False},
    "destination_proposals": {"is_finalized": False},
    "proposal_discussions": {"is_edited": False, "parent_comment_id": None},
    "expense_participants": {"is_settled": False},
    "recipe_ingredients": {"optional": False},
    "meal_plans": {"is_completed": False},
    "shopping_list_items": {"is_purchased": False},
    "trip_user_availability": {"synced_from_central": False},
}


def _key(value):
    return value if value is None or isinstance(value, (int, float, bool)) else str(value)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.orders = []
        self.limit_count = None
        self.offset_count = 0
        self.count_mode = None

    # operations

    def select(self, columns="*", count=None):
        self.op = "select"
        self.count_mode = count
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict=None, **kwargs):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters

    def eq(self, column, value):
        self.filters.append(lambda r: _key(r.get(column)) == _key(value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: _key(r.get(column)) != _key(value))
        return self

    def in_(self, column, values):
        wanted = {_key(v) for v in values}
        self.filters.append(lambda r: _key(r.get(column)) in wanted)
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) >= str(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) <= str(value))
        return self

    def is_(self, column, value):
        if value in (None, "null"):
            self.filters.append(lambda r: r.get(column) is None)
        else:
            self.filters.append(lambda r: r.get(column) == value)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    # execution

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        error = self.db.failures.get((self.table, self.op))
        if error is not None:
            raise error
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db._new_row(self.table, p) for p in payload]
            rows.extend(created)
            return FakeResponse(copy.deepcopy(created))

        if self.op == "upsert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            conflict_cols = [c.strip() for c in (self.on_conflict or "id").split(",")]
            result = []
            for p in payload:
                existing = next(
                    (r for r in rows if all(_key(r.get(c)) == _key(p.get(c)) for c in conflict_cols)),
                    None
                )
                if existing is not None:
                    existing.update(copy.deepcopy(p))
                    result.append(existing)
                else:
                    row = self.db._new_row(self.table, p)
                    rows.append(row)
                    result.append(row)
            return FakeResponse(copy.deepcopy(result))

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for r in matched:
                r.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(matched))

        if self.op == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(matched))

        for column, desc in reversed(self.orders):
            present = [r for r in matched if r.get(column) is not None]
            missing = [r for r in matched if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            matched = present + missing
        total = len(matched)
        matched = matched[self.offset_count:]
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        return FakeResponse(copy.deepcopy(matched), count=total if self.count_mode else None)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise Exception(f"function {self.name} does not exist")
        return FakeResponse(handler(self.params))


class FakeAuth:
    def __init__(self):
        self.users_by_token = {}
        self.accounts = {}
        self.signed_out = False
        self.confirm_email = False
        self.get_user_calls = 0

    def add_user(self, token, user_id, email):
        self.users_by_token[token] = SimpleNamespace(
            id=user_id, email=email, user_metadata={}, app_metadata={},
            created_at=None, updated_at=None
        )

    def get_user(self, jwt=None):
        self.get_user_calls += 1
        user = self.users_by_token.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=user)

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.accounts:
            if self.confirm_email:
                # unconfirmed duplicate: a user object with no identities
                return SimpleNamespace(user=SimpleNamespace(id=str(uuid.uuid4()), email=email, identities=[]), session=None)
            raise Exception("User already registered")
        user = SimpleNamespace(id=str(uuid.uuid4()), email=email, identities=[SimpleNamespace(provider="email")])
        self.accounts[email] = (credentials["password"], user)
        session = None if self.confirm_email else SimpleNamespace(access_token=f"token-{user.id}")
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = f"token-{account[1].id}"
        self.add_user(token, account[1].id, account[1].email)
        return SimpleNamespace(user=account[1], session=SimpleNamespace(access_token=token))

    def sign_out(self):
        self.signed_out = True


class FakeSupabase:
    """Tables are lists of dict rows; every row gets an id and a created_at."""

    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.rpc_handlers = {}
        self.rpc_calls = []
        self.auth = FakeAuth()
        self._clock = 0

    def _timestamp(self):
        self._clock += 1
        return (_EPOCH + timedelta(seconds=self._clock)).isoformat()

    def _new_row(self, table, payload):
        row = dict(TABLE_DEFAULTS.get(table, {}))
        row.update(copy.deepcopy(payload))
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._timestamp())
        if table == "trip_members" and row.get("joined_at") is None:
            row["joined_at"] = row["created_at"]
        return row

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def fail(self, table, op, error=None):
        """Make the next and every later `op` on `table` raise."""
        self.failures[(table, op)] = error or Exception(f"{op} on {table} failed")

    def seed(self, table, *rows):
        created = [self._new_row(table, r) for r in rows]
        self.tables.setdefault(table, []).extend(created)
        return created[0] if len(created) == 1 else created

    def rows(self, table, **where):
        return [
            r for r in self.tables.get(table, [])
            if all(_key(r.get(k)) == _key(v) for k, v in where.items())
        ]
