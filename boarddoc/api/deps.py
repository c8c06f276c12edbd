from boarddoc.integrations.trello import TrelloClient


def get_trello_client() -> TrelloClient:
    return TrelloClient.from_settings()
