class SocketIOScheduler:
    """Runs a callback after a delay in a Socket.IO background task.

    There is no handle to cancel: callbacks re-validate the room when
    they fire, so a room deleted in the meantime turns them into no-ops.
    """

    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger

    def call_later(self, delay_sec: float, fn, *args) -> None:
        def _worker():
            if delay_sec > 0:
                self.socketio.sleep(delay_sec)
            fn(*args)

        if self.logger:
            self.logger.debug(f"[timer-set] fn={getattr(fn, '__name__', fn)} delay={delay_sec}s")
        self.socketio.start_background_task(_worker)
