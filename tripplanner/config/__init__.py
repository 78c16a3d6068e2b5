from tripplanner.config.settings import settings
