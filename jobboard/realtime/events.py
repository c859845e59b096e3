"""Event names on the live channel. Clients depend on these strings verbatim."""

# Server -> client
JOB_NEW = "job:new"
JOB_REOPENED = "job:reopened"
JOB_RECOMMENDED = "job:recommended"
JOB_MATCH = "job:match"
APP_NEW = "app:new"
APP_STATUS = "app:status"
JOB_STATUS = "job:status"
JOB_DELETED = "job:deleted"
ACCOUNT_BANNED = "account:banned"
ACCOUNT_UNBANNED = "account:unbanned"
REGISTERED = "registered"
PONG = "pong"

# Client -> server
REGISTER = "register"
PING = "ping"
