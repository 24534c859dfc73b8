from formatting import describe


def handler(event, context):
    for record in event.get("Records", []):
        print(describe(record))
