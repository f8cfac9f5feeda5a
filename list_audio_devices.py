from core.audio_output import AudioOutput

print("=== Output Devices ===")
default_id = AudioOutput.get_default_device()["id"]
for dev in AudioOutput.list_devices():
    marker = " (default)" if dev['id'] == default_id else ""
    print(f"{dev['id']}: {dev['name']} (outputs: {dev['channels']}, {dev['sample_rate']:.0f}Hz){marker}")

print("\nSet KITTEN_OUTPUT_DEVICE in your environment or .env file to the index of your preferred device above.")
print("Example: KITTEN_OUTPUT_DEVICE=1")
