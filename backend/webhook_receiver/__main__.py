from webhook_receiver.main import run

run()
