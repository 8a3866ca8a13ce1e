from cinegrok.app.models.user import User
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.profile_draft import ProfileDraft
from cinegrok.app.models.interested_profile import InterestedProfile
from cinegrok.app.models.profile_event import ProfileEvent
