class RoomError(Exception):
    """Base for the errors reported back to the connection that caused them."""

    error = 'RoomError'
    message = 'Room error'

    def __init__(self, code=None, message=None):
        self.code = code
        if message:
            self.message = message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.error, 'message': self.message, 'code': self.code}


class RoomNotFound(RoomError):
    error = 'NotFound'
    message = 'Room code not found.'


class RoomFull(RoomError):
    error = 'RoomFull'
    message = 'Room is already full.'
