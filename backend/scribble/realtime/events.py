# Inbound (client -> server)
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
START_GAME = "start-game"
DRAWING_DATA = "drawing-data"
CHAT_MESSAGE = "chat-message"
CLEAR_CANVAS = "clear-canvas"
GET_GAME_STATE = "get-game-state"

# Outbound (server -> client)
ROOM_CREATED = "room-created"
ROOM_ERROR = "room-error"
PLAYER_JOINED = "player-joined"
PLAYER_LEFT = "player-left"
GAME_STARTED = "game-started"
GAME_UPDATE = "game-update"
TIMER_UPDATE = "timer-update"

# Snapshot events: each recipient gets its own (possibly redacted) view.
SNAPSHOT_EVENTS = frozenset({PLAYER_JOINED, PLAYER_LEFT, GAME_STARTED, GAME_UPDATE})
